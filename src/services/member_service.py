"""Member service for querying and managing the community roster."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.member import Member
from src.services.errors import InvalidInputError, NotFoundError
from src.services.household_service import HouseholdService

logger = logging.getLogger(__name__)


class MemberService:
    """Service for member-related operations."""

    def __init__(self, session: AsyncSession):
        """Initialize with database session."""
        self.session = session

    async def create_member(
        self,
        first_name: str,
        last_name: str,
        email: str,
        address: str,
        unit_number: Optional[str] = None,
        is_resident: bool = True,
        is_renter: bool = False,
        is_board_member: bool = False,
        phone: Optional[str] = None,
        telegram_id: Optional[str] = None,
    ) -> Member:
        """
        Create a member and link it to its household.

        Raises:
            InvalidInputError: If name, email or address is empty
        """
        if not first_name.strip() or not last_name.strip():
            raise InvalidInputError("First and last name are required")
        if not email.strip():
            raise InvalidInputError("Email is required")
        if not address.strip():
            raise InvalidInputError("Address is required")

        member = Member(
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            email=email.strip().lower(),
            address=address.strip(),
            unit_number=unit_number.strip() if unit_number and unit_number.strip() else None,
            is_resident=is_resident,
            is_renter=is_renter,
            is_board_member=is_board_member,
            phone=phone,
            telegram_id=telegram_id,
        )
        await HouseholdService(self.session).assign(member)
        self.session.add(member)
        await self.session.commit()
        logger.info("Created member %d (%s) at %r", member.id, member.full_name, member.household_key)
        return member

    async def get_member(self, member_id: int) -> Optional[Member]:
        return await self.session.get(Member, member_id)

    async def require_member(self, member_id: int) -> Member:
        """Get member by ID or raise NotFoundError."""
        member = await self.get_member(member_id)
        if member is None:
            raise NotFoundError("Member", member_id)
        return member

    async def list_members(self) -> list[Member]:
        result = await self.session.execute(select(Member).order_by(Member.id))
        return list(result.scalars().all())

    async def list_homeowners(self) -> list[Member]:
        """List residents who are not renters, in roster order."""
        result = await self.session.execute(
            select(Member)
            .where(Member.is_resident.is_(True), Member.is_renter.is_(False))
            .order_by(Member.id)
        )
        return list(result.scalars().all())

    async def list_active_board_members(self) -> list[Member]:
        result = await self.session.execute(
            select(Member).where(Member.is_board_member.is_(True), Member.is_active.is_(True))
        )
        return list(result.scalars().all())

    async def list_active_members(self) -> list[Member]:
        result = await self.session.execute(select(Member).where(Member.is_active.is_(True)))
        return list(result.scalars().all())

    async def set_block_status(
        self, member_id: int, is_blocked: bool, reason: Optional[str] = None
    ) -> Member:
        """Block or unblock a member.

        Raises:
            NotFoundError: If the member does not exist
        """
        member = await self.require_member(member_id)
        member.is_blocked = is_blocked
        member.block_reason = reason if is_blocked else None
        await self.session.commit()
        logger.info("Member %d block status set to %s", member_id, is_blocked)
        return member


__all__ = ["MemberService"]
