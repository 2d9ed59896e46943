"""Shared FastAPI dependencies for the dues API."""

from typing import Optional

from fastapi import Header, Request

from src.services.blob_store import BlobStore
from src.services.notification_service import NotificationDispatcher


def get_dispatcher(request: Request) -> Optional[NotificationDispatcher]:
    """Notification dispatcher created at startup (None when not running)."""
    return getattr(request.app.state, "dispatcher", None)


def get_blob_store(request: Request) -> Optional[BlobStore]:
    return getattr(request.app.state, "blob_store", None)


def get_actor_id(
    actor_id: int | None = Header(None, alias="X-Actor-Id"),  # noqa: B008
) -> Optional[int]:
    """Admin member performing the request, recorded in the audit log."""
    return actor_id


__all__ = ["get_actor_id", "get_blob_store", "get_dispatcher"]
