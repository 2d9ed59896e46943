"""Audit log model for tracking admin actions on obligations and payments."""

from typing import Any

from sqlalchemy import JSON, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class AuditLog(Base, BaseModel):
    """Audit log entry for tracking changes to ledger entities.

    Records who (actor_id) did what (action) to which entity (entity_type, entity_id)
    and optional field snapshots (changes).
    """

    __tablename__ = "audit_logs"

    entity_type: Mapped[str] = mapped_column(index=False)
    """Entity type being audited: "fee", "fine", "payment"."""

    entity_id: Mapped[int] = mapped_column(index=False)
    """Primary key of the entity being audited (0 for batch actions)."""

    action: Mapped[str] = mapped_column(index=False)
    """Action performed: "generate_annual", "verify", "record_admin_payment", etc."""

    actor_id: Mapped[int | None] = mapped_column(
        ForeignKey("members.id"), nullable=True, index=False
    )
    """Member (admin) who performed the action. None for system actions."""

    changes: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True, index=False)
    """Optional JSON snapshot of changed fields: {"status": "Paid", "fees_updated": 3}."""

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, entity_type={self.entity_type}, entity_id={self.entity_id}, "
            f"action={self.action}, actor_id={self.actor_id}, created_at={self.created_at})>"
        )


__all__ = ["AuditLog"]
