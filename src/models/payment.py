"""Payment ORM model for attempts to settle fees and fines."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel
from src.models.fee import ObligationStatus


class PaymentMethod(str, Enum):
    """Channel a payment arrived through."""

    VENMO = "Venmo"
    """Self-reported by the member; needs administrator verification"""

    CHECK = "Check"
    """Recorded by an administrator; trusted at creation"""

    CASH = "Cash"
    """Recorded by an administrator; trusted at creation"""

    @property
    def is_self_reported(self) -> bool:
        return self is PaymentMethod.VENMO


class VerificationStatus(str, Enum):
    """Administrator trust decision for a self-reported payment."""

    PENDING = "Pending"
    VERIFIED = "Verified"
    REJECTED = "Rejected"


class Payment(Base, BaseModel):
    """Model representing one payment attempt.

    A payment counts toward an obligation only when
    ``status == Paid`` and ``verification_status == Verified``.
    Legacy payment-only records carry no verification status and never count.
    """

    __tablename__ = "payments"

    user_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
        comment="Member who made the payment",
    )
    fee_type: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Free-text label, e.g. 'Annual HOA Fee 2025'",
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    status: Mapped[ObligationStatus] = mapped_column(
        SQLEnum(ObligationStatus, native_enum=False),
        nullable=False,
        default=ObligationStatus.PENDING,
    )
    payment_method: Mapped[PaymentMethod] = mapped_column(
        SQLEnum(PaymentMethod, native_enum=False),
        nullable=False,
    )
    transaction_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Channel reference (Venmo transaction id, or synthesized CHK-/CSH- id)",
    )

    # Channel-specific details
    channel_username: Mapped[str | None] = mapped_column(String(255), nullable=True)
    channel_transaction_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    check_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    receipt_ref: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        comment="Blob store reference (or URL) of the receipt screenshot",
    )

    # Verification
    verification_status: Mapped[VerificationStatus | None] = mapped_column(
        SQLEnum(VerificationStatus, native_enum=False),
        nullable=True,
    )
    admin_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Back-references to the obligation settled
    fee_id: Mapped[int | None] = mapped_column(
        ForeignKey("fees.id", ondelete="SET NULL"), nullable=True, index=True
    )
    fine_id: Mapped[int | None] = mapped_column(
        ForeignKey("fines.id", ondelete="SET NULL"), nullable=True, index=True
    )

    __table_args__ = (
        Index("idx_payment_transaction", "transaction_id"),
        Index("idx_payment_user_date", "user_id", "payment_date"),
    )

    @property
    def counts_as_paid(self) -> bool:
        """True when this payment satisfies its obligation."""
        return (
            self.status == ObligationStatus.PAID
            and self.verification_status == VerificationStatus.VERIFIED
        )

    def __repr__(self) -> str:
        return (
            f"<Payment(id={self.id}, user_id={self.user_id}, amount={self.amount}, "
            f"method={self.payment_method}, status={self.status}, "
            f"verification_status={self.verification_status}, fee_id={self.fee_id}, "
            f"fine_id={self.fine_id})>"
        )


__all__ = ["Payment", "PaymentMethod", "VerificationStatus"]
