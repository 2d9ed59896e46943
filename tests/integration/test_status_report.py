"""Household payment status report across generation and verification."""

from datetime import date
from decimal import Decimal

import pytest

from src.models.fee import FeeFrequency, ObligationStatus
from src.models.payment import VerificationStatus
from src.services.fee_service import FeeService
from src.services.fine_service import FineService
from src.services.payment_service import PaymentService
from src.services.status_service import StatusService
from src.services.verification_service import VerificationService

THIS_YEAR = date.today().year

pytestmark = pytest.mark.integration


@pytest.fixture
async def roster(make_member):
    """Two-owner household, a single-owner unit, and a renter."""
    return {
        "alice": await make_member("Alice", "Smith", address="1 Elm St", is_board_member=True),
        "bob": await make_member("Bob", "Smith", address="1 Elm St"),
        "carol": await make_member("Carol", "Lee", address="2 Elm St", unit_number="4B"),
        "ray": await make_member("Ray", "Renter", address="3 Elm St", is_renter=True),
    }


async def _verified_payment(session, member, fee_id=None):
    payment = await PaymentService(session).intake_self_reported_payment(
        member.id, f"Annual HOA Fee {THIS_YEAR}", Decimal("300"), "@venmo", f"tx-{member.id}",
        fee_id=fee_id,
    )
    await VerificationService(session).verify_payment(
        payment.id, ObligationStatus.PENDING, VerificationStatus.VERIFIED
    )


async def test_empty_without_any_fee(session, roster):
    assert await StatusService(session).household_payment_status_report() == []


async def test_rows_follow_household_fee(session, roster):
    await FeeService(session).generate_annual_fees(THIS_YEAR, Decimal("325"), "Annual HOA Fee")
    fees = {fee.address: fee for fee in await FeeService(session).list_annual_fees(THIS_YEAR)}
    await _verified_payment(session, roster["bob"], fee_id=fees["1 Elm St"].id)

    rows = await StatusService(session).household_payment_status_report()

    assert [row["first_name"] for row in rows] == ["Alice", "Bob", "Carol"]
    alice, bob, carol = rows
    assert alice["user_type"] == "board-member"
    assert bob["user_type"] == "homeowner"
    assert alice["has_paid_annual_fee"] is bob["has_paid_annual_fee"] is True
    assert alice["payment_status"] == "Paid"
    assert carol["has_paid_annual_fee"] is False
    assert carol["payment_status"] == "Pending"
    assert carol["household_key"] == "2 Elm St Unit 4B"
    assert {row["annual_fee_amount"] for row in rows} == {Decimal("325")}


async def test_payments_shared_within_household(session, roster):
    await FeeService(session).create_fee(
        "Pool key", Decimal("20"), FeeFrequency.ONE_TIME, date(THIS_YEAR, 6, 1),
        user_id=roster["carol"].id,
    )
    await _verified_payment(session, roster["bob"])

    rows = {row["first_name"]: row for row in await StatusService(session).household_payment_status_report()}

    assert rows["Alice"]["has_paid_annual_fee"] is True
    assert rows["Bob"]["has_paid_annual_fee"] is True
    assert rows["Carol"]["has_paid_annual_fee"] is False
    assert rows["Alice"]["annual_fee_amount"] == Decimal("300.00")


async def test_fine_marks_only_the_fined_owner(session, roster):
    await FeeService(session).generate_annual_fees(THIS_YEAR, Decimal("300"), "Annual HOA Fee")
    fees = {fee.address: fee for fee in await FeeService(session).list_annual_fees(THIS_YEAR)}
    await _verified_payment(session, roster["alice"], fee_id=fees["1 Elm St"].id)
    await FineService(session).add_fine("1 Elm St", roster["bob"].id, Decimal("50"), "Trash bins")

    rows = {row["first_name"]: row for row in await StatusService(session).household_payment_status_report()}

    assert rows["Alice"]["has_paid_annual_fee"] is True
    assert rows["Bob"]["has_paid_annual_fee"] is False


async def test_other_year_uses_default_amount(session, roster):
    await FeeService(session).generate_annual_fees(THIS_YEAR, Decimal("325"), "Annual HOA Fee")

    rows = await StatusService(session).household_payment_status_report(THIS_YEAR + 1)

    assert len(rows) == 3
    assert all(row["has_paid_annual_fee"] is False for row in rows)
    assert {row["annual_fee_amount"] for row in rows} == {Decimal("300.00")}
