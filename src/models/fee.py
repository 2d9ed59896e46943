"""Fee ORM model for recurring and one-time obligations."""

from datetime import date
from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, Date, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class FeeFrequency(str, Enum):
    """How often a fee is assessed."""

    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    ANNUALLY = "Annually"
    ONE_TIME = "One-time"


class ObligationStatus(str, Enum):
    """Settlement status shared by fees, fines and payments."""

    PENDING = "Pending"
    PAID = "Paid"
    OVERDUE = "Overdue"


class Fee(Base, BaseModel):
    """
    An amount owed by a household or member.

    Annual fees are linked to a household (``address`` holds the household key,
    ``household_id`` the explicit household). ``user_id`` points at the primary
    homeowner and predates household linkage; it is a soft reference that may
    dangle after roster edits (see RepairService).

    A NULL ``status`` is treated as unpaid.
    """

    __tablename__ = "fees"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(
        Numeric(10, 2),
        nullable=False,
        comment="Fee amount in dollars",
    )
    frequency: Mapped[FeeFrequency] = mapped_column(
        SQLEnum(FeeFrequency, native_enum=False),
        nullable=False,
    )
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_late: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Linkage
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        index=True,
        comment="Primary member (soft reference, kept for backward compatibility)",
    )
    address: Mapped[str | None] = mapped_column(
        String(300),
        nullable=True,
        comment="Household key the fee is assessed against",
    )
    household_id: Mapped[int | None] = mapped_column(
        ForeignKey("households.id"),
        nullable=True,
        index=True,
    )
    year: Mapped[int | None] = mapped_column(Integer, nullable=True, comment="Year for annual fees")

    reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    type: Mapped[str | None] = mapped_column(String(20), nullable=True, default="Fee")
    status: Mapped[ObligationStatus | None] = mapped_column(
        SQLEnum(ObligationStatus, native_enum=False),
        nullable=True,
        default=ObligationStatus.PENDING,
    )

    __table_args__ = (
        Index("idx_fee_type", "type"),
        Index("idx_fee_address_year_frequency", "address", "year", "frequency"),
    )

    @property
    def is_paid(self) -> bool:
        return self.status == ObligationStatus.PAID

    def __repr__(self) -> str:
        return (
            f"<Fee(id={self.id}, name={self.name!r}, amount={self.amount}, "
            f"frequency={self.frequency}, year={self.year}, address={self.address!r}, "
            f"user_id={self.user_id}, status={self.status})>"
        )


__all__ = ["Fee", "FeeFrequency", "ObligationStatus"]
