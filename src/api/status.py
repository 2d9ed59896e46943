"""Standing API endpoints."""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.schemas import HouseholdStatusRow, MemberStandingResponse
from src.services import get_async_session
from src.services.status_service import StatusService

router = APIRouter(prefix="/api/status", tags=["status"])


@router.get("/members/{member_id}", response_model=MemberStandingResponse)
async def member_standing(
    member_id: int,
    year: int | None = None,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> MemberStandingResponse:
    """Whether the member's household is current for the year (default: this year)."""
    year = year or date.today().year
    is_current = await StatusService(session).is_household_current(member_id, year)
    return MemberStandingResponse(member_id=member_id, year=year, is_current=is_current)


@router.get("/households", response_model=list[HouseholdStatusRow])
async def household_status_report(
    year: int | None = None,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> list[HouseholdStatusRow]:
    rows = await StatusService(session).household_payment_status_report(year)
    return [HouseholdStatusRow(**row) for row in rows]


__all__ = ["router"]
