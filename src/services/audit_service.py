"""Audit service for recording admin actions on the dues ledger."""

from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.models.audit_log import AuditLog


def _json_safe(value: Any) -> Any:
    """Convert Decimal/Enum/date values so they fit a JSON column."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


class AuditService:
    """Service for audit log operations.

    Entries are added to the caller's session and committed together with the
    ledger write they describe.
    """

    @staticmethod
    def log(
        session: AsyncSession,
        entity_type: str,
        entity_id: int,
        action: str,
        actor_id: int | None = None,
        changes: dict | None = None,
    ) -> AuditLog:
        """Create audit log entry (one-liner).

        Args:
            session: Database session
            entity_type: Type of entity ("fee", "fine", "payment")
            entity_id: Primary key of the entity, 0 for batch actions
            action: Action performed ("verify", "generate_annual", etc.)
            actor_id: Member (admin) who performed the action (optional)
            changes: Optional snapshot of changed fields

        Returns:
            Created AuditLog object
        """
        audit = AuditLog(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor_id=actor_id,
            changes={k: _json_safe(v) for k, v in changes.items()} if changes else None,
        )
        session.add(audit)
        return audit


__all__ = ["AuditService"]
