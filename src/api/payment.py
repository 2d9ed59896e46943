"""Payment API endpoints.

Handles the payment lifecycle:
- Self-reported Venmo payments (pending verification)
- Check/cash payments recorded by administrators
- Verification decisions and the pending queue
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_actor_id, get_blob_store, get_dispatcher
from src.api.schemas import (
    AdminPaymentPayload,
    PaymentResponse,
    PendingPaymentResponse,
    SelfReportedPaymentPayload,
    VerifyPaymentPayload,
)
from src.services import get_async_session
from src.services.blob_store import BlobStore
from src.services.errors import NotFoundError
from src.services.notification_service import NotificationDispatcher
from src.services.payment_service import PaymentService
from src.services.verification_service import VerificationService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post(
    "/self-reported", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED
)
async def submit_self_reported_payment(
    payload: SelfReportedPaymentPayload,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    dispatcher: NotificationDispatcher | None = Depends(get_dispatcher),  # noqa: B008
) -> PaymentResponse:
    """Member reports a Venmo payment; it stays pending until verified."""
    payment = await PaymentService(session, dispatcher=dispatcher).intake_self_reported_payment(
        member_id=payload.member_id,
        fee_type=payload.fee_type,
        amount=payload.amount,
        channel_username=payload.venmo_username,
        channel_transaction_id=payload.venmo_transaction_id,
        receipt_ref=payload.receipt_ref,
        fee_id=payload.fee_id,
        fine_id=payload.fine_id,
    )
    return PaymentResponse.model_validate(payment)


@router.post("/admin", status_code=status.HTTP_201_CREATED)
async def record_admin_payment(
    payload: AdminPaymentPayload,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    dispatcher: NotificationDispatcher | None = Depends(get_dispatcher),  # noqa: B008
    actor_id: int | None = Depends(get_actor_id),  # noqa: B008
) -> dict[str, Any]:
    """Administrator records a check or cash payment."""
    service = PaymentService(session, dispatcher=dispatcher, actor_id=actor_id)
    return await service.intake_admin_payment(**payload.model_dump())


@router.post("/{payment_id}/verify", response_model=PaymentResponse)
async def verify_payment(
    payment_id: int,
    payload: VerifyPaymentPayload,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    dispatcher: NotificationDispatcher | None = Depends(get_dispatcher),  # noqa: B008
    actor_id: int | None = Depends(get_actor_id),  # noqa: B008
) -> PaymentResponse:
    service = VerificationService(session, dispatcher=dispatcher, actor_id=actor_id)
    payment = await service.verify_payment(
        payment_id, payload.status, payload.verification_status, payload.admin_notes
    )
    return PaymentResponse.model_validate(payment)


@router.get("/pending", response_model=list[PendingPaymentResponse])
async def list_pending_payments(
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
    blob_store: BlobStore | None = Depends(get_blob_store),  # noqa: B008
) -> list[PendingPaymentResponse]:
    """Venmo payments awaiting verification, with receipt links."""
    entries = await PaymentService(session, blob_store=blob_store).list_pending_self_reported()
    return [
        PendingPaymentResponse.model_validate(
            {
                **PaymentResponse.model_validate(entry["payment"]).model_dump(),
                "receipt_url": entry["receipt_url"],
            }
        )
        for entry in entries
    ]


@router.get("/member/{member_id}", response_model=list[PaymentResponse])
async def list_member_payments(
    member_id: int,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> list[PaymentResponse]:
    payments = await PaymentService(session).list_member_payments(member_id)
    return [PaymentResponse.model_validate(payment) for payment in payments]


@router.get("/transaction/{transaction_id}", response_model=PaymentResponse)
async def get_payment_by_transaction(
    transaction_id: str,
    session: AsyncSession = Depends(get_async_session),  # noqa: B008
) -> PaymentResponse:
    payment = await PaymentService(session).get_by_transaction_id(transaction_id)
    if payment is None:
        raise NotFoundError("Payment with transaction", transaction_id)
    return PaymentResponse.model_validate(payment)


__all__ = ["router"]
