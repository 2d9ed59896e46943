"""Payment service for recording payments from every channel.

Provides methods for:
- Self-reported (Venmo) intake awaiting verification
- Admin-recorded (Check/Cash) intake that settles obligations immediately
- Legacy payment-only records
- Payment queries, including the pending verification queue
"""

import logging
import time
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import get_settings
from src.models.fee import Fee, FeeFrequency, ObligationStatus
from src.models.fine import Fine
from src.models.member import Member
from src.models.notification import NotificationType
from src.models.payment import Payment, PaymentMethod, VerificationStatus
from src.services.audit_service import AuditService
from src.services.blob_store import BlobStore, resolve_receipt_url
from src.services.errors import InvalidInputError, NotFoundError
from src.services.locale_service import format_amount
from src.services.member_service import MemberService
from src.services.notification_service import Audience

logger = logging.getLogger(__name__)


def _epoch_millis() -> int:
    return int(time.time() * 1000)


def _require_positive(amount: Decimal) -> Decimal:
    try:
        value = Decimal(amount)
    except (TypeError, ArithmeticError) as e:
        raise InvalidInputError(f"Invalid amount: {amount!r}") from e
    if value <= 0:
        raise InvalidInputError("Amount must be positive")
    return value


def unpaid(column):
    """Filter for obligations that are not settled; NULL status counts as unpaid."""
    return or_(column.is_(None), column != ObligationStatus.PAID)


class PaymentService:
    """Core payment intake and query service."""

    def __init__(
        self,
        session: AsyncSession,
        dispatcher=None,
        blob_store: Optional[BlobStore] = None,
        actor_id: Optional[int] = None,
    ):
        """Initialize payment service.

        Args:
            session: Async database session
            dispatcher: NotificationDispatcher for fire-and-forget notifications
            blob_store: Receipt storage used to resolve receipt URLs
            actor_id: Admin member performing the actions
        """
        self.session = session
        self.dispatcher = dispatcher
        self.blob_store = blob_store
        self.actor_id = actor_id

    def _notify(self, recipients, type, title, body, data=None) -> None:
        if self.dispatcher is not None:
            self.dispatcher.fire(recipients, type, title, body, data)

    async def _require_obligations(
        self, fee_id: Optional[int], fine_id: Optional[int]
    ) -> tuple[Optional[Fee], Optional[Fine]]:
        fee = fine = None
        if fee_id is not None:
            fee = await self.session.get(Fee, fee_id)
            if fee is None:
                raise NotFoundError("Fee", fee_id)
        if fine_id is not None:
            fine = await self.session.get(Fine, fine_id)
            if fine is None:
                raise NotFoundError("Fine", fine_id)
        return fee, fine

    async def intake_self_reported_payment(
        self,
        member_id: int,
        fee_type: str,
        amount: Decimal,
        channel_username: str,
        channel_transaction_id: str,
        receipt_ref: Optional[str] = None,
        fee_id: Optional[int] = None,
        fine_id: Optional[int] = None,
    ) -> Payment:
        """Record a payment the member says they made through Venmo.

        The payment stays Pending until an administrator verifies it. Active
        board members are notified after the payment is stored.

        Args:
            member_id: Paying member
            fee_type: Free-text label, e.g. "Annual HOA Fee 2025"
            amount: Amount paid
            channel_username: Member's Venmo username
            channel_transaction_id: Venmo transaction ID
            receipt_ref: Optional receipt screenshot reference
            fee_id: Fee the payment is meant to settle
            fine_id: Fine the payment is meant to settle

        Returns:
            Created Payment

        Raises:
            InvalidInputError: If username/transaction ID is blank or amount not positive
            NotFoundError: If member, fee or fine does not exist
        """
        username = (channel_username or "").strip()
        transaction_id = (channel_transaction_id or "").strip()
        if not username:
            raise InvalidInputError("Venmo username is required")
        if not transaction_id:
            raise InvalidInputError("Venmo transaction ID is required")
        if not fee_type or not fee_type.strip():
            raise InvalidInputError("Fee type is required")
        value = _require_positive(amount)

        member = await MemberService(self.session).require_member(member_id)
        await self._require_obligations(fee_id, fine_id)

        payment = Payment(
            user_id=member_id,
            fee_type=fee_type.strip(),
            amount=value,
            payment_date=date.today(),
            status=ObligationStatus.PENDING,
            payment_method=PaymentMethod.VENMO,
            transaction_id=transaction_id,
            channel_username=username,
            channel_transaction_id=transaction_id,
            receipt_ref=receipt_ref,
            verification_status=VerificationStatus.PENDING,
            fee_id=fee_id,
            fine_id=fine_id,
        )
        self.session.add(payment)
        await self.session.commit()
        logger.info(
            "Recorded self-reported payment %d from member %d: %s (%s)",
            payment.id,
            member_id,
            value,
            transaction_id,
        )

        self._notify(
            Audience.BOARD_MEMBERS,
            NotificationType.PAYMENT_PENDING,
            "Payment pending verification",
            f"{member.full_name} reported a Venmo payment of {format_amount(value)} "
            f"for {payment.fee_type} (transaction {transaction_id})",
            {"payment_id": payment.id},
        )
        return payment

    async def intake_admin_payment(
        self,
        member_id: int,
        fee_type: str,
        amount: Decimal,
        method: PaymentMethod,
        payment_date: date,
        check_number: Optional[str] = None,
        notes: Optional[str] = None,
        fee_id: Optional[int] = None,
        fine_id: Optional[int] = None,
    ) -> dict[str, Any]:
        """Record a check or cash payment received by an administrator.

        Admin-recorded payments are trusted: they are Paid and Verified at
        creation. Without an explicit fee_id/fine_id the member's unpaid fees,
        the household's unpaid annual fee and the member's unpaid fines are
        settled, and the payment links to the first of each. A housemate's
        personal fees are never touched. Each obligation update commits on
        its own.

        Returns:
            {"success", "payment_id", "fees_updated", "fines_updated", "message"}

        Raises:
            InvalidInputError: If method is not Check/Cash, amount not positive, or
                no target is given while batch settlement is disabled
            NotFoundError: If member, fee or fine does not exist
        """
        try:
            method = PaymentMethod(method)
        except ValueError as e:
            raise InvalidInputError(f"Unknown payment method: {method!r}") from e
        if method.is_self_reported:
            raise InvalidInputError("Admin payments must be Check or Cash")
        if not fee_type or not fee_type.strip():
            raise InvalidInputError("Fee type is required")
        value = _require_positive(amount)

        member = await MemberService(self.session).require_member(member_id)
        fee, fine = await self._require_obligations(fee_id, fine_id)

        if fee is not None or fine is not None:
            fees = [fee] if fee is not None else []
            fines = [fine] if fine is not None else []
        elif get_settings().admin_payment_settles_all_outstanding:
            fees = await self._outstanding_fees(member)
            fines = await self._outstanding_fines(member_id)
        else:
            raise InvalidInputError("fee_id or fine_id is required")

        if method == PaymentMethod.CHECK:
            transaction_id = f"CHK-{_epoch_millis()}-{check_number or 'manual'}"
        else:
            transaction_id = f"CSH-{_epoch_millis()}-manual"
        payment = Payment(
            user_id=member_id,
            fee_type=fee_type.strip(),
            amount=value,
            payment_date=payment_date,
            status=ObligationStatus.PAID,
            payment_method=method,
            transaction_id=transaction_id,
            check_number=check_number,
            notes=notes,
            verification_status=VerificationStatus.VERIFIED,
            fee_id=fees[0].id if fees else None,
            fine_id=fines[0].id if fines else None,
        )
        self.session.add(payment)
        await self.session.flush()
        AuditService.log(
            self.session,
            "payment",
            payment.id,
            "record_admin",
            actor_id=self.actor_id,
            changes={"method": method, "amount": value, "user_id": member_id},
        )
        await self.session.commit()

        fees_updated = 0
        for item in fees:
            item.status = ObligationStatus.PAID
            await self.session.commit()
            fees_updated += 1
        fines_updated = 0
        for item in fines:
            item.status = ObligationStatus.PAID
            await self.session.commit()
            fines_updated += 1

        logger.info(
            "Recorded %s payment %d for member %d: %d fees, %d fines settled",
            method.value,
            payment.id,
            member_id,
            fees_updated,
            fines_updated,
        )

        self._notify(
            [member_id],
            NotificationType.PAYMENT_RECORDED,
            "Payment recorded",
            f"Your {method.value.lower()} payment of {format_amount(value)} "
            f"for {payment.fee_type} was recorded",
            {"payment_id": payment.id},
        )
        return {
            "success": True,
            "payment_id": payment.id,
            "fees_updated": fees_updated,
            "fines_updated": fines_updated,
            "message": f"Payment recorded; {fees_updated} fees and {fines_updated} fines marked paid",
        }

    async def _outstanding_fees(self, member: Member) -> list[Fee]:
        """Unpaid fees on the member, plus the household's shared annual fees."""
        household = [Fee.address == member.household_key]
        if member.household_id is not None:
            household.append(Fee.household_id == member.household_id)
        owned = or_(
            Fee.user_id == member.id,
            and_(Fee.frequency == FeeFrequency.ANNUALLY, or_(*household)),
        )
        result = await self.session.execute(
            select(Fee).where(owned, unpaid(Fee.status)).order_by(Fee.due_date, Fee.id)
        )
        return list(result.scalars().all())

    async def _outstanding_fines(self, member_id: int) -> list[Fine]:
        result = await self.session.execute(
            select(Fine)
            .where(Fine.resident_id == member_id, unpaid(Fine.status))
            .order_by(Fine.date_issued, Fine.id)
        )
        return list(result.scalars().all())

    async def record_legacy_payment(
        self, member_id: int, fee_type: str, amount: Decimal, payment_date: date
    ) -> Payment:
        """Record a payment-only entry without verification.

        Such records carry no verification status and never count as paid.

        Raises:
            InvalidInputError: If amount is not positive
            NotFoundError: If the member does not exist
        """
        value = _require_positive(amount)
        await MemberService(self.session).require_member(member_id)

        payment = Payment(
            user_id=member_id,
            fee_type=fee_type,
            amount=value,
            payment_date=payment_date,
            status=ObligationStatus.PAID,
            payment_method=PaymentMethod.VENMO,
            transaction_id=f"legacy-{_epoch_millis()}",
        )
        self.session.add(payment)
        await self.session.commit()
        logger.info("Recorded legacy payment %d for member %d", payment.id, member_id)
        return payment

    async def get_payment(self, payment_id: int) -> Optional[Payment]:
        return await self.session.get(Payment, payment_id)

    async def get_by_transaction_id(self, transaction_id: str) -> Optional[Payment]:
        result = await self.session.execute(
            select(Payment).where(Payment.transaction_id == transaction_id).limit(1)
        )
        return result.scalar_one_or_none()

    async def list_member_payments(self, member_id: int) -> list[Payment]:
        """List a member's payments, newest first."""
        result = await self.session.execute(
            select(Payment)
            .where(Payment.user_id == member_id)
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
        )
        return list(result.scalars().all())

    async def list_payments(self) -> list[Payment]:
        result = await self.session.execute(
            select(Payment).order_by(Payment.payment_date.desc(), Payment.id.desc())
        )
        return list(result.scalars().all())

    async def list_pending_self_reported(self) -> list[dict[str, Any]]:
        """Venmo payments awaiting verification, newest first.

        Returns:
            List of {"payment": Payment, "receipt_url": str | None}
        """
        result = await self.session.execute(
            select(Payment)
            .where(
                Payment.payment_method == PaymentMethod.VENMO,
                or_(
                    Payment.verification_status.is_(None),
                    Payment.verification_status == VerificationStatus.PENDING,
                ),
            )
            .order_by(Payment.created_at.desc(), Payment.id.desc())
        )
        return [
            {
                "payment": payment,
                "receipt_url": resolve_receipt_url(self.blob_store, payment.receipt_ref),
            }
            for payment in result.scalars().all()
        ]


__all__ = ["PaymentService", "unpaid"]
