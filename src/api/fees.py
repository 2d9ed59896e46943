"""Fee administration API endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_actor_id
from src.api.schemas import (
    AmountPayload,
    FeeCreatePayload,
    FeePageResponse,
    FeeResponse,
    FeeUpdatePayload,
    GenerateAnnualFeesPayload,
    PastDuePayload,
)
from src.services import get_async_session
from src.services.fee_service import FeeService
from src.services.repair_service import RepairService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/fees", tags=["fees"])


@router.post("/annual/generate")
async def generate_annual_fees(
    payload: GenerateAnnualFeesPayload,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    actor_id: int | None = Depends(get_actor_id),  # noqa: B008
) -> dict[str, Any]:
    """Create this year's annual fee for every homeowner household that lacks one."""
    service = FeeService(session, actor_id=actor_id)
    return await service.generate_annual_fees(payload.year, payload.amount, payload.description)


@router.patch("/annual/{year}/amount")
async def bulk_update_annual_fee_amount(
    year: int,
    payload: AmountPayload,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    actor_id: int | None = Depends(get_actor_id),  # noqa: B008
) -> dict[str, Any]:
    service = FeeService(session, actor_id=actor_id)
    return await service.bulk_update_annual_fee_amount(year, payload.amount)


@router.get("", response_model=FeePageResponse)
async def list_fees(
    limit: int = 20,
    offset: int = 0,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> FeePageResponse:
    page = await FeeService(session).list_fees_paginated(limit=limit, offset=offset)
    return FeePageResponse(
        items=[FeeResponse.model_validate(fee) for fee in page["items"]],
        total=page["total"],
    )


@router.post("", response_model=FeeResponse, status_code=status.HTTP_201_CREATED)
async def create_fee(
    payload: FeeCreatePayload,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    actor_id: int | None = Depends(get_actor_id),  # noqa: B008
) -> FeeResponse:
    fee = await FeeService(session, actor_id=actor_id).create_fee(**payload.model_dump())
    return FeeResponse.model_validate(fee)


@router.post("/past-due", response_model=FeeResponse, status_code=status.HTTP_201_CREATED)
async def add_past_due_amount(
    payload: PastDuePayload,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    actor_id: int | None = Depends(get_actor_id),  # noqa: B008
) -> FeeResponse:
    """Record a carried-over balance as an overdue one-time fee."""
    fee = await FeeService(session, actor_id=actor_id).add_past_due_amount(
        payload.user_id, payload.amount, payload.description, payload.due_date
    )
    return FeeResponse.model_validate(fee)


@router.post("/repair-links")
async def repair_obligation_links(
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> dict[str, Any]:
    """Re-link fees whose primary member is missing."""
    return await RepairService(session).repair_obligation_links()


@router.patch("/{fee_id}", response_model=FeeResponse)
async def update_fee(
    fee_id: int,
    payload: FeeUpdatePayload,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    actor_id: int | None = Depends(get_actor_id),  # noqa: B008
) -> FeeResponse:
    changes = payload.model_dump(exclude_unset=True)
    fee = await FeeService(session, actor_id=actor_id).update_fee(fee_id, **changes)
    return FeeResponse.model_validate(fee)


@router.delete("/{fee_id}")
async def delete_fee(
    fee_id: int,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    actor_id: int | None = Depends(get_actor_id),  # noqa: B008
) -> dict[str, Any]:
    await FeeService(session, actor_id=actor_id).delete_fee(fee_id)
    return {"success": True, "message": f"Fee {fee_id} deleted"}


__all__ = ["router"]
