"""Tests for the payment verification workflow."""

from datetime import date
from decimal import Decimal

import pytest

from src.models.fee import FeeFrequency, ObligationStatus
from src.models.notification import NotificationType
from src.models.payment import VerificationStatus
from src.services.errors import InvalidInputError, InvalidTransitionError, NotFoundError
from src.services.fee_service import FeeService
from src.services.fine_service import FineService
from src.services.payment_service import PaymentService
from src.services.verification_service import VerificationService


@pytest.fixture
async def pending_payment(session, make_member):
    """Self-reported payment linked to one fee and one fine."""
    member = await make_member()
    fee = await FeeService(session).create_fee(
        "Annual HOA Fee 2025", Decimal("300"), FeeFrequency.ANNUALLY, date(2025, 12, 31),
        user_id=member.id, address=member.household_key, year=2025,
    )
    fine_id = (
        await FineService(session).add_fine(member.address, member.id, Decimal("25"), "Noise")
    )["fine_id"]
    payment = await PaymentService(session).intake_self_reported_payment(
        member.id, "Annual HOA Fee 2025", Decimal("325"), "@pat", "999",
        fee_id=fee.id, fine_id=fine_id,
    )
    fine = await FineService(session).get_fine(fine_id)
    return payment, fee, fine


@pytest.mark.unit
async def test_verify_cascades_to_fee_and_fine(session, dispatcher, pending_payment):
    payment, fee, fine = pending_payment

    result = await VerificationService(session, dispatcher=dispatcher).verify_payment(
        payment.id, ObligationStatus.PENDING, VerificationStatus.VERIFIED, "Matched Venmo feed"
    )

    assert result.status == ObligationStatus.PAID
    assert result.verification_status == VerificationStatus.VERIFIED
    assert result.admin_notes == "Matched Venmo feed"
    assert fee.status == ObligationStatus.PAID
    assert fine.status == ObligationStatus.PAID

    recipients, notification_type = dispatcher.fire.call_args.args[:2]
    assert recipients == [payment.user_id]
    assert notification_type == NotificationType.PAYMENT_VERIFIED


@pytest.mark.unit
async def test_reject_leaves_obligations(session, dispatcher, pending_payment):
    payment, fee, fine = pending_payment

    result = await VerificationService(session, dispatcher=dispatcher).verify_payment(
        payment.id, ObligationStatus.OVERDUE, VerificationStatus.REJECTED, "No such transaction"
    )

    assert result.status == ObligationStatus.OVERDUE
    assert result.verification_status == VerificationStatus.REJECTED
    assert fee.status == ObligationStatus.PENDING
    assert fine.status == ObligationStatus.PENDING

    args = dispatcher.fire.call_args.args
    assert args[1] == NotificationType.PAYMENT_REJECTED
    assert "No such transaction" in args[3]


@pytest.mark.unit
@pytest.mark.parametrize("first", [VerificationStatus.VERIFIED, VerificationStatus.REJECTED])
async def test_decision_is_terminal(session, pending_payment, first):
    payment, _, _ = pending_payment
    service = VerificationService(session)
    await service.verify_payment(payment.id, ObligationStatus.PENDING, first)

    with pytest.raises(InvalidTransitionError):
        await service.verify_payment(payment.id, ObligationStatus.PAID, VerificationStatus.VERIFIED)


@pytest.mark.unit
async def test_transition_error_is_invalid_input(session, pending_payment):
    payment, _, _ = pending_payment
    service = VerificationService(session)
    await service.verify_payment(payment.id, ObligationStatus.PENDING, VerificationStatus.VERIFIED)

    with pytest.raises(InvalidInputError):
        await service.verify_payment(payment.id, ObligationStatus.PAID, VerificationStatus.REJECTED)


@pytest.mark.unit
async def test_admin_recorded_payment_cannot_be_reverified(session, make_member):
    from src.models.payment import PaymentMethod

    member = await make_member()
    result = await PaymentService(session).intake_admin_payment(
        member.id, "Dues", Decimal("10"), PaymentMethod.CASH, date(2025, 1, 1)
    )

    with pytest.raises(InvalidTransitionError):
        await VerificationService(session).verify_payment(
            result["payment_id"], ObligationStatus.PAID, VerificationStatus.REJECTED
        )


@pytest.mark.unit
async def test_legacy_row_without_status_can_be_verified(session, make_member):
    member = await make_member()
    legacy = await PaymentService(session).record_legacy_payment(
        member.id, "Annual HOA Fee 2025", Decimal("300"), date(2025, 1, 15)
    )

    result = await VerificationService(session).verify_payment(
        legacy.id, ObligationStatus.PAID, VerificationStatus.VERIFIED
    )

    assert result.counts_as_paid is True


@pytest.mark.unit
async def test_unknown_payment(session, dispatcher):
    with pytest.raises(NotFoundError, match="Payment 31"):
        await VerificationService(session, dispatcher=dispatcher).verify_payment(
            31, ObligationStatus.PAID, VerificationStatus.VERIFIED
        )
    dispatcher.fire.assert_not_called()


@pytest.mark.unit
async def test_pending_is_not_a_decision(session, pending_payment):
    payment, _, _ = pending_payment

    with pytest.raises(InvalidInputError, match="Verified or Rejected"):
        await VerificationService(session).verify_payment(
            payment.id, ObligationStatus.PENDING, VerificationStatus.PENDING
        )


@pytest.mark.unit
async def test_unknown_payment_status_rejected_before_changes(session, dispatcher, pending_payment):
    payment, fee, _ = pending_payment

    with pytest.raises(InvalidInputError, match="Bogus"):
        await VerificationService(session, dispatcher=dispatcher).verify_payment(
            payment.id, "Bogus", VerificationStatus.REJECTED
        )

    await session.refresh(payment)
    assert payment.verification_status == VerificationStatus.PENDING
    assert payment.status == ObligationStatus.PENDING
    assert fee.status == ObligationStatus.PENDING
    dispatcher.fire.assert_not_called()
