"""Repair fees whose primary member link is missing or dangling."""

import logging
from typing import Any, NamedTuple, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.fee import Fee
from src.models.member import Member

logger = logging.getLogger(__name__)


class Candidate(NamedTuple):
    """Member fields used for matching."""

    id: int
    address: str
    full_name: str


def match_member(
    address: Optional[str], name: Optional[str], candidates: list[Candidate]
) -> Optional[Candidate]:
    """Find the member a fee most likely belongs to.

    Tries the fee address as a case-insensitive substring of member
    addresses first, then any word of the fee name inside a member's
    full name.
    """
    if address:
        needle = address.lower()
        for candidate in candidates:
            if needle in (candidate.address or "").lower():
                return candidate

    tokens = [token.lower() for token in (name or "").split()]
    for candidate in candidates:
        full_name = candidate.full_name.lower()
        if any(token in full_name for token in tokens):
            return candidate
    return None


class RepairService:
    """Data repair utilities for the fee ledger. Never deletes anything."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def repair_obligation_links(self) -> dict[str, Any]:
        """Re-link fees whose user_id is empty or points at no member.

        Each repaired fee commits on its own. Fees with a valid user_id are
        left alone and not counted.

        Returns:
            {"success", "fixed_count", "skipped_count", "message"}
        """
        members = (await self.session.execute(select(Member).order_by(Member.id))).scalars()
        candidates = [Candidate(m.id, m.address, m.full_name) for m in members]
        member_ids = {candidate.id for candidate in candidates}

        rows = await self.session.execute(
            select(Fee.id, Fee.user_id, Fee.address, Fee.name).order_by(Fee.id)
        )
        broken = [row for row in rows.all() if row.user_id is None or row.user_id not in member_ids]

        fixed = 0
        skipped = 0
        for fee_id, old_user_id, address, name in broken:
            match = match_member(address, name, candidates)
            if match is None:
                skipped += 1
                logger.warning("No member match for fee %d (%r, %r)", fee_id, name, address)
                continue
            try:
                await self.session.execute(
                    update(Fee).where(Fee.id == fee_id).values(user_id=match.id)
                )
                await self.session.commit()
                fixed += 1
                logger.info("Linked fee %d to member %d (was %s)", fee_id, match.id, old_user_id)
            except SQLAlchemyError as e:
                await self.session.rollback()
                skipped += 1
                logger.error("Failed to link fee %d: %s", fee_id, e)

        logger.info("Fee link repair finished: %d fixed, %d skipped", fixed, skipped)
        return {
            "success": True,
            "fixed_count": fixed,
            "skipped_count": skipped,
            "message": f"Fixed {fixed} fees, skipped {skipped}",
        }


__all__ = ["Candidate", "RepairService", "match_member"]
