"""Household resolution: derive the grouping key and manage Household rows."""

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.household import Household
from src.models.member import Member

logger = logging.getLogger(__name__)


def household_key(address: str, unit_number: str | None = None) -> str:
    """Build the household key for an address.

    The unit suffix is appended only when a unit number is present:

        >>> household_key("12 Oak St")
        '12 Oak St'
        >>> household_key("12 Oak St", "4B")
        '12 Oak St Unit 4B'
    """
    return f"{address} Unit {unit_number}" if unit_number else address


def group_homeowners(members: Iterable[Member]) -> dict[str, list[Member]]:
    """Group homeowners by household key.

    Renters and non-residents are dropped. Dict and list order follow the
    input order, so the first member of each group is the first enumerated
    homeowner at that address.
    """
    groups: dict[str, list[Member]] = {}
    for member in members:
        if not member.is_homeowner:
            continue
        groups.setdefault(household_key(member.address, member.unit_number), []).append(member)
    return groups


class HouseholdService:
    """Service for Household lookups and member assignment."""

    def __init__(self, session: AsyncSession):
        """Initialize with database session."""
        self.session = session

    async def get_by_key(self, key: str) -> Household | None:
        result = await self.session.execute(select(Household).where(Household.key == key))
        return result.scalar_one_or_none()

    async def get_or_create(self, address: str, unit_number: str | None = None) -> Household:
        """Return the household for an address, inserting it on first use.

        The new row is flushed, not committed; callers commit with their own write.
        """
        key = household_key(address, unit_number)
        household = await self.get_by_key(key)
        if household:
            return household

        household = Household(key=key, address=address, unit_number=unit_number or None)
        self.session.add(household)
        await self.session.flush()
        logger.info("Created household %d for key %r", household.id, key)
        return household

    async def assign(self, member: Member) -> Household:
        """Link a member to the household matching its current address."""
        household = await self.get_or_create(member.address, member.unit_number)
        if member.household_id != household.id:
            member.household_id = household.id
        return household


__all__ = ["household_key", "group_homeowners", "HouseholdService"]
