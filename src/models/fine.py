"""Fine ORM model for violation-based obligations."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Date, Integer, Numeric, String, Text
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel
from src.models.fee import ObligationStatus


class Fine(Base, BaseModel):
    """A violation fine issued to one member.

    Fines are personal: they are never shared across a household, and any
    unpaid fine takes the member out of good standing.
    """

    __tablename__ = "fines"

    violation: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    date_issued: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[ObligationStatus] = mapped_column(
        SQLEnum(ObligationStatus, native_enum=False),
        nullable=False,
        default=ObligationStatus.PENDING,
    )
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    resident_id: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        index=True,
        comment="Member the fine was issued to (soft reference)",
    )

    @property
    def is_paid(self) -> bool:
        return self.status == ObligationStatus.PAID

    def __repr__(self) -> str:
        return (
            f"<Fine(id={self.id}, violation={self.violation!r}, amount={self.amount}, "
            f"resident_id={self.resident_id}, status={self.status})>"
        )


__all__ = ["Fine"]
