"""Household standing: is a member's household current on its dues?

Standing is decided by an ordered chain of rules. Each rule looks at a
StandingContext and returns True or False when it can decide, or None to
defer to the next rule. The first verdict wins; if every rule defers the
member is not current.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import get_settings
from src.models.fee import Fee, FeeFrequency, ObligationStatus
from src.models.fine import Fine
from src.models.member import Member
from src.models.payment import Payment
from src.services.household_service import group_homeowners
from src.services.member_service import MemberService

logger = logging.getLogger(__name__)


@dataclass
class StandingContext:
    """Everything the standing rules need for one member and year."""

    member: Member
    year: int
    annual_fee_prefix: str
    fines: list[Fine] = field(default_factory=list)
    fees: list[Fee] = field(default_factory=list)
    payments: list[Payment] = field(default_factory=list)

    def _linked(self, fees: Iterable[Fee]) -> list[Fee]:
        """Fees of the member's household, falling back to fees on the member's id."""
        fees = list(fees)
        by_household = [fee for fee in fees if fee_belongs_to_household(fee, self.member)]
        if by_household:
            return by_household
        return [fee for fee in fees if fee.user_id == self.member.id]

    @property
    def annual_fees(self) -> list[Fee]:
        return self._linked(
            fee
            for fee in self.fees
            if fee.frequency == FeeFrequency.ANNUALLY and fee.year == self.year
        )

    @property
    def household_fees(self) -> list[Fee]:
        return self._linked(self.fees)


Rule = Callable[[StandingContext], Optional[bool]]


def fee_belongs_to_household(fee: Fee, member: Member) -> bool:
    if fee.address and fee.address == member.household_key:
        return True
    return member.household_id is not None and fee.household_id == member.household_id


def unpaid_fines_block(ctx: StandingContext) -> Optional[bool]:
    """Any unpaid fine takes the member out of good standing."""
    if any(fine.status != ObligationStatus.PAID for fine in ctx.fines):
        return False
    return None


def annual_fee_records(ctx: StandingContext) -> Optional[bool]:
    """Annual fee records for the year decide standing when they exist."""
    fees = ctx.annual_fees
    if not fees:
        return None
    return all(fee.status == ObligationStatus.PAID for fee in fees)


def fee_records_covered_by_payments(ctx: StandingContext) -> Optional[bool]:
    """Without an annual fee, other fee records must each have a verified payment."""
    fees = ctx.household_fees
    if not fees:
        return None
    covered = {payment.fee_id for payment in ctx.payments if payment.counts_as_paid}
    return all(fee.id in covered for fee in fees)


def verified_annual_payment(ctx: StandingContext) -> Optional[bool]:
    """Fallback for years without fee records: a verified annual payment."""
    return any(
        payment.counts_as_paid
        and payment.fee_type.startswith(ctx.annual_fee_prefix)
        and payment.payment_date.year == ctx.year
        for payment in ctx.payments
    )


MEMBER_STANDING_RULES: tuple[Rule, ...] = (
    unpaid_fines_block,
    annual_fee_records,
    fee_records_covered_by_payments,
    verified_annual_payment,
)

HOUSEHOLD_REPORT_RULES: tuple[Rule, ...] = (
    unpaid_fines_block,
    annual_fee_records,
    verified_annual_payment,
)


def evaluate(rules: Sequence[Rule], ctx: StandingContext) -> bool:
    """Run rules in order; the first verdict wins, an exhausted chain is False."""
    for rule in rules:
        verdict = rule(ctx)
        if verdict is not None:
            logger.debug(
                "Member %d standing for %d decided by %s: %s",
                ctx.member.id,
                ctx.year,
                rule.__name__,
                verdict,
            )
            return verdict
    return False


class StatusService:
    """Read-only queries answering whether households are current."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.settings = get_settings()

    async def is_household_current(self, member_id: int, year: Optional[int] = None) -> bool:
        """Check whether a member's household is current for a year.

        Args:
            member_id: Member to check
            year: Year to check, defaults to the current year

        Returns:
            True if the member is in good standing

        Raises:
            NotFoundError: If the member does not exist
        """
        member = await MemberService(self.session).require_member(member_id)
        year = year or date.today().year

        fines = await self.session.execute(select(Fine).where(Fine.resident_id == member.id))
        links = [Fee.address == member.household_key, Fee.user_id == member.id]
        if member.household_id is not None:
            links.append(Fee.household_id == member.household_id)
        fees = await self.session.execute(select(Fee).where(or_(*links)).order_by(Fee.id))
        payments = await self.session.execute(select(Payment).where(Payment.user_id == member.id))

        ctx = StandingContext(
            member=member,
            year=year,
            annual_fee_prefix=self.settings.annual_fee_type_prefix,
            fines=list(fines.scalars().all()),
            fees=list(fees.scalars().all()),
            payments=list(payments.scalars().all()),
        )
        return evaluate(MEMBER_STANDING_RULES, ctx)

    async def household_payment_status_report(self, year: Optional[int] = None) -> list[dict[str, Any]]:
        """Standing of every homeowner for a year.

        Payments made by any homeowner of a household count for all of them.
        Returns an empty list when no fee has ever been recorded.

        Returns:
            One row per homeowner in roster order
        """
        if await self.session.scalar(select(Fee.id).limit(1)) is None:
            return []
        year = year or date.today().year

        homeowners = await MemberService(self.session).list_homeowners()
        households = group_homeowners(homeowners)
        owner_ids = [member.id for member in homeowners]

        fines_by_member: dict[int, list[Fine]] = {}
        payments_by_member: dict[int, list[Payment]] = {}
        if owner_ids:
            fines = await self.session.execute(select(Fine).where(Fine.resident_id.in_(owner_ids)))
            for fine in fines.scalars().all():
                fines_by_member.setdefault(fine.resident_id, []).append(fine)
            payments = await self.session.execute(
                select(Payment).where(Payment.user_id.in_(owner_ids))
            )
            for payment in payments.scalars().all():
                payments_by_member.setdefault(payment.user_id, []).append(payment)

        annual = await self.session.execute(
            select(Fee)
            .where(Fee.frequency == FeeFrequency.ANNUALLY, Fee.year == year)
            .order_by(Fee.id)
        )
        annual_fees = list(annual.scalars().all())

        rows = []
        for key, members in households.items():
            household_payments = [
                payment for m in members for payment in payments_by_member.get(m.id, [])
            ]
            for member in members:
                ctx = StandingContext(
                    member=member,
                    year=year,
                    annual_fee_prefix=self.settings.annual_fee_type_prefix,
                    fines=fines_by_member.get(member.id, []),
                    fees=annual_fees,
                    payments=household_payments,
                )
                has_paid = evaluate(HOUSEHOLD_REPORT_RULES, ctx)
                matching = ctx.annual_fees
                amount: Decimal = (
                    matching[0].amount if matching else self.settings.default_annual_fee_amount
                )
                rows.append(
                    {
                        "id": member.id,
                        "first_name": member.first_name,
                        "last_name": member.last_name,
                        "email": member.email,
                        "address": member.address,
                        "unit_number": member.unit_number,
                        "household_key": key,
                        "user_type": "board-member" if member.is_board_member else "homeowner",
                        "has_paid_annual_fee": has_paid,
                        "payment_status": "Paid" if has_paid else "Pending",
                        "annual_fee_amount": amount,
                    }
                )

        position = {member_id: i for i, member_id in enumerate(owner_ids)}
        rows.sort(key=lambda row: position[row["id"]])
        logger.info("Built payment status report for %d: %d homeowners", year, len(rows))
        return rows


__all__ = [
    "HOUSEHOLD_REPORT_RULES",
    "MEMBER_STANDING_RULES",
    "Rule",
    "StandingContext",
    "StatusService",
    "annual_fee_records",
    "evaluate",
    "fee_belongs_to_household",
    "fee_records_covered_by_payments",
    "unpaid_fines_block",
    "verified_annual_payment",
]
