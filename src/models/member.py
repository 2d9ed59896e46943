"""Member ORM model for the community roster."""

from sqlalchemy import Boolean, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models import Base, BaseModel


class Member(Base, BaseModel):
    """
    A person on the community roster.

    Role flags are independent booleans:
    - is_resident: lives in (or owns) a dwelling in the community
    - is_renter: rents rather than owns; renters never carry annual fees
    - is_board_member: receives admin notifications (pending payments etc.)
    - is_active / is_blocked: account status managed by administrators

    A member is a homeowner iff ``is_resident and not is_renter``.
    Household membership is derived from address + unit number and cached in
    ``household_id``.
    """

    __tablename__ = "members"

    # Identity fields
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, comment="Login email, unique per member"
    )
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    telegram_id: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Telegram chat ID for push notifications (optional)",
    )

    # Dwelling
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    unit_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    household_id: Mapped[int | None] = mapped_column(
        ForeignKey("households.id"),
        nullable=True,
        index=True,
        comment="Household derived from address + unit number",
    )

    # Role flags
    is_resident: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_renter: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_board_member: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Account status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)
    is_blocked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    block_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        Index("idx_member_email", "email", unique=True),
        Index("idx_member_board_active", "is_board_member", "is_active"),
    )

    @property
    def is_homeowner(self) -> bool:
        """Homeowners are residents who do not rent."""
        return self.is_resident and not self.is_renter

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def household_key(self) -> str:
        from src.services.household_service import household_key

        return household_key(self.address, self.unit_number)

    def __repr__(self) -> str:
        roles = []
        if self.is_homeowner:
            roles.append("homeowner")
        if self.is_renter:
            roles.append("renter")
        if self.is_board_member:
            roles.append("board")
        role_str = ",".join(roles) if roles else "none"

        return (
            f"<Member(id={self.id}, name={self.full_name}, address={self.household_key!r}, "
            f"is_active={self.is_active}, roles=[{role_str}])>"
        )


__all__ = ["Member"]
