"""In-app notification records."""

from enum import Enum
from typing import Any

from sqlalchemy import JSON, Boolean, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class NotificationType(str, Enum):
    """Kinds of notifications emitted by the payment workflow."""

    PAYMENT_PENDING = "payment_pending"
    PAYMENT_VERIFIED = "payment_verified"
    PAYMENT_REJECTED = "payment_rejected"
    PAYMENT_RECORDED = "payment_recorded"
    FINE = "fine"


class UserNotification(Base, BaseModel):
    """Notification shown to one member until read."""

    __tablename__ = "user_notifications"

    user_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    __table_args__ = (Index("idx_notification_user_unread", "user_id", "is_read"),)

    def __repr__(self) -> str:
        return (
            f"<UserNotification(id={self.id}, user_id={self.user_id}, type={self.type}, "
            f"is_read={self.is_read})>"
        )


__all__ = ["UserNotification", "NotificationType"]
