"""Verification workflow for self-reported payments."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.models.fee import Fee, ObligationStatus
from src.models.fine import Fine
from src.models.notification import NotificationType
from src.models.payment import Payment, VerificationStatus
from src.services.audit_service import AuditService
from src.services.errors import InvalidInputError, InvalidTransitionError, NotFoundError
from src.services.locale_service import format_amount

logger = logging.getLogger(__name__)

# Verification states a payment may still leave
OPEN_STATES = (None, VerificationStatus.PENDING)


class VerificationService:
    """Applies an administrator's trust decision to a payment.

    Verification is terminal: once a payment is Verified or Rejected it
    cannot be decided again.
    """

    def __init__(self, session: AsyncSession, dispatcher=None, actor_id: Optional[int] = None):
        self.session = session
        self.dispatcher = dispatcher
        self.actor_id = actor_id

    async def verify_payment(
        self,
        payment_id: int,
        status: ObligationStatus,
        verification_status: VerificationStatus,
        admin_notes: Optional[str] = None,
    ) -> Payment:
        """Verify or reject a pending payment.

        Verified forces the payment to Paid and marks the linked fee and fine
        Paid. Rejected stores the given status and leaves obligations alone.
        The payer is notified once the change is committed.

        Args:
            payment_id: Payment to decide
            status: Payment status to store (overridden to Paid when verified)
            verification_status: Verified or Rejected
            admin_notes: Optional note, shown to the payer on rejection

        Returns:
            Updated Payment

        Raises:
            NotFoundError: If the payment does not exist
            InvalidInputError: If verification_status is not Verified/Rejected
                or status is not a known payment status
            InvalidTransitionError: If the payment was already decided
        """
        try:
            target = VerificationStatus(verification_status)
        except ValueError as e:
            raise InvalidInputError(f"Unknown verification status: {verification_status!r}") from e
        if target == VerificationStatus.PENDING:
            raise InvalidInputError("Verification status must be Verified or Rejected")
        try:
            requested = ObligationStatus(status)
        except ValueError as e:
            raise InvalidInputError(f"Unknown payment status: {status!r}") from e

        payment = await self.session.get(Payment, payment_id)
        if payment is None:
            raise NotFoundError("Payment", payment_id)
        if payment.verification_status not in OPEN_STATES:
            raise InvalidTransitionError(
                f"Payment {payment_id} is already {payment.verification_status.value}"
            )

        fee = await self.session.get(Fee, payment.fee_id) if payment.fee_id else None
        fine = await self.session.get(Fine, payment.fine_id) if payment.fine_id else None

        verified = target == VerificationStatus.VERIFIED
        payment.verification_status = target
        payment.status = ObligationStatus.PAID if verified else requested
        payment.admin_notes = admin_notes
        if verified:
            if fee is not None:
                fee.status = ObligationStatus.PAID
            if fine is not None:
                fine.status = ObligationStatus.PAID

        AuditService.log(
            self.session,
            "payment",
            payment.id,
            "verify" if verified else "reject",
            actor_id=self.actor_id,
            changes={"status": payment.status, "verification_status": target},
        )
        await self.session.commit()
        logger.info(
            "Payment %d %s (fee=%s, fine=%s)",
            payment_id,
            target.value.lower(),
            payment.fee_id,
            payment.fine_id,
        )

        if self.dispatcher is not None:
            amount = format_amount(payment.amount)
            if verified:
                self.dispatcher.fire(
                    [payment.user_id],
                    NotificationType.PAYMENT_VERIFIED,
                    "Payment verified",
                    f"Your payment of {amount} for {payment.fee_type} was verified",
                    {"payment_id": payment.id},
                )
            else:
                reason = f" Reason: {admin_notes}" if admin_notes else ""
                self.dispatcher.fire(
                    [payment.user_id],
                    NotificationType.PAYMENT_REJECTED,
                    "Payment rejected",
                    f"Your payment of {amount} for {payment.fee_type} was rejected.{reason}",
                    {"payment_id": payment.id, "admin_notes": admin_notes},
                )
        return payment


__all__ = ["VerificationService"]
