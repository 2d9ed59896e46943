"""
Blob storage for receipt images.

Receipts are opaque references produced by an upload step outside this
service. The ledger only needs to resolve a reference to a URL for admins,
read it back, and delete it during cleanup. Every failure is raised as
CollaboratorError so callers can log it without touching ledger state.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from src.services.errors import CollaboratorError

logger = logging.getLogger(__name__)


class BlobStore(ABC):
    """Abstract interface for receipt blob storage."""

    @abstractmethod
    def get_url(self, ref: str) -> Optional[str]:
        """
        Resolve a reference to a URL the admin UI can open.

        Returns:
            URL, or None if the blob does not exist

        Raises:
            CollaboratorError: If the backend cannot be reached
        """
        pass

    @abstractmethod
    def read(self, ref: str) -> bytes:
        """
        Return the blob content.

        Raises:
            CollaboratorError: If the blob is missing or unreadable
        """
        pass

    @abstractmethod
    def delete(self, ref: str) -> None:
        """
        Delete the blob.

        Raises:
            CollaboratorError: If the blob is missing or cannot be deleted
        """
        pass


class LocalBlobStore(BlobStore):
    """Filesystem-backed store: a reference is a file name under ``root``."""

    def __init__(self, root: str | Path, base_url: str = "/receipts"):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _path(self, ref: str) -> Path:
        path = (self.root / ref).resolve()
        # Refs are relative names; reject anything escaping the root
        if self.root.resolve() not in path.parents:
            raise CollaboratorError(f"Invalid blob reference: {ref!r}")
        return path

    def put(self, ref: str, content: bytes) -> str:
        path = self._path(ref)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as e:
            raise CollaboratorError(f"Cannot write blob {ref!r}: {e}") from e
        return ref

    def get_url(self, ref: str) -> Optional[str]:
        if not self._path(ref).exists():
            return None
        return f"{self.base_url}/{ref}"

    def read(self, ref: str) -> bytes:
        try:
            return self._path(ref).read_bytes()
        except OSError as e:
            raise CollaboratorError(f"Cannot read blob {ref!r}: {e}") from e

    def delete(self, ref: str) -> None:
        try:
            self._path(ref).unlink()
        except OSError as e:
            raise CollaboratorError(f"Cannot delete blob {ref!r}: {e}") from e


def resolve_receipt_url(store: Optional[BlobStore], ref: Optional[str]) -> Optional[str]:
    """Best-effort URL for a receipt reference.

    References that are already URLs pass through. Store failures are logged
    and yield None.
    """
    if not ref:
        return None
    if ref.startswith("http"):
        return ref
    if store is None:
        return None
    try:
        return store.get_url(ref)
    except CollaboratorError as e:
        logger.warning("Failed to resolve receipt URL for %r: %s", ref, e)
        return None


def delete_receipts(store: BlobStore, refs: list[str]) -> dict:
    """Delete several receipts, continuing past individual failures.

    Returns:
        {"total", "successful", "failed", "results": [{"ref", "success", "error"?}]}
    """
    results = []
    for ref in refs:
        try:
            store.delete(ref)
            results.append({"ref": ref, "success": True})
        except CollaboratorError as e:
            logger.error("Failed to delete receipt %r: %s", ref, e)
            results.append({"ref": ref, "success": False, "error": str(e)})

    successful = sum(1 for r in results if r["success"])
    return {
        "total": len(refs),
        "successful": successful,
        "failed": len(refs) - successful,
        "results": results,
    }


__all__ = ["BlobStore", "LocalBlobStore", "resolve_receipt_url", "delete_receipts"]
