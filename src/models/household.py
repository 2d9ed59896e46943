"""Household ORM model: the fee-bearing unit shared by members at one address."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class Household(Base, BaseModel):
    """A physical dwelling identified by address and optional unit number.

    The ``key`` column holds the derived household key
    (``"12 Oak St Unit 4"``) and is unique. Members and annual fees point at the
    household by ``id`` so that grouping no longer depends on string matching,
    while ``key`` keeps fees created before this table existed resolvable.
    """

    __tablename__ = "households"

    key: Mapped[str] = mapped_column(
        String(300),
        nullable=False,
        unique=True,
        index=True,
        comment="Derived household key: address plus ' Unit N' when a unit is present",
    )
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    def __repr__(self) -> str:
        return f"<Household(id={self.id}, key={self.key!r})>"


__all__ = ["Household"]
