"""Fine API endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_actor_id, get_dispatcher
from src.api.schemas import FineCreatePayload, FineResponse, FineStatusPayload
from src.services import get_async_session
from src.services.fine_service import FineService
from src.services.notification_service import NotificationDispatcher

router = APIRouter(prefix="/api/fines", tags=["fines"])


@router.get("", response_model=list[FineResponse])
async def list_fines(
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> list[FineResponse]:
    fines = await FineService(session).list_fines()
    return [FineResponse.model_validate(fine) for fine in fines]


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_fine(
    payload: FineCreatePayload,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    dispatcher: NotificationDispatcher | None = Depends(get_dispatcher),  # noqa: B008
    actor_id: int | None = Depends(get_actor_id),  # noqa: B008
) -> dict[str, Any]:
    """Issue a fine to a member."""
    service = FineService(session, dispatcher=dispatcher, actor_id=actor_id)
    return await service.add_fine(
        payload.address, payload.member_id, payload.amount, payload.reason, payload.description
    )


@router.patch("/{fine_id}/status")
async def update_fine_status(
    fine_id: int,
    payload: FineStatusPayload,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    actor_id: int | None = Depends(get_actor_id),  # noqa: B008
) -> dict[str, Any]:
    return await FineService(session, actor_id=actor_id).update_fine_status(
        fine_id, payload.status
    )


@router.get("/member/{member_id}", response_model=list[FineResponse])
async def list_member_fines(
    member_id: int,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> list[FineResponse]:
    fines = await FineService(session).list_member_fines(member_id)
    return [FineResponse.model_validate(fine) for fine in fines]


__all__ = ["router"]
