"""Fee service: annual obligation generation and fee administration.

Provides methods for:
- Generating one annual fee per homeowner household (idempotent per year)
- Bulk-updating the amount of unpaid annual fees
- Creating, editing, deleting and listing fees
- Recording past-due balances as one-time fees
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.fee import Fee, FeeFrequency, ObligationStatus
from src.models.payment import Payment
from src.services.audit_service import AuditService
from src.services.errors import InvalidInputError, NotFoundError
from src.services.household_service import HouseholdService, group_homeowners
from src.services.member_service import MemberService

logger = logging.getLogger(__name__)

# Fields an admin may change through update_fee
EDITABLE_FIELDS = {
    "name",
    "amount",
    "frequency",
    "due_date",
    "description",
    "is_late",
    "user_id",
    "address",
    "year",
    "reason",
    "type",
    "status",
}


class FeeService:
    """Service for fee generation and administration."""

    def __init__(self, session: AsyncSession, actor_id: Optional[int] = None):
        """Initialize fee service.

        Args:
            session: Async database session
            actor_id: Admin member performing the actions, recorded in the audit log
        """
        self.session = session
        self.actor_id = actor_id

    async def generate_annual_fees(
        self, year: int, amount: Decimal, description: str
    ) -> dict[str, Any]:
        """Create one annual fee per homeowner household that has none for the year.

        Households are derived from homeowner addresses; the first homeowner
        enumerated at an address becomes the fee's primary member. Each insert
        commits on its own, so a failure affects only that household.

        Args:
            year: Target year
            amount: Fee amount
            description: Fee description; the name is "{description} {year}"

        Returns:
            {"success", "fees_created", "failed", "message"}
        """
        if amount is None or Decimal(amount) <= 0:
            return {
                "success": False,
                "fees_created": 0,
                "failed": 0,
                "message": "Amount must be positive",
            }

        homeowners = await MemberService(self.session).list_homeowners()
        households = group_homeowners(homeowners)

        existing = await self.list_annual_fees(year)
        already_billed = {fee.address for fee in existing if fee.address}

        # Plain values only: a rollback below expires every loaded member
        pending = [
            (key, members[0].id, members[0].address, members[0].unit_number)
            for key, members in households.items()
            if key not in already_billed
        ]

        created = 0
        failed = 0
        household_service = HouseholdService(self.session)
        for key, primary_id, address, unit_number in pending:
            try:
                household = await household_service.get_or_create(address, unit_number)
                fee = Fee(
                    name=f"{description} {year}",
                    amount=Decimal(amount),
                    frequency=FeeFrequency.ANNUALLY,
                    due_date=date(year, 12, 31),
                    description=description,
                    is_late=False,
                    user_id=primary_id,
                    address=key,
                    household_id=household.id,
                    year=year,
                    type="Fee",
                    status=ObligationStatus.PENDING,
                )
                self.session.add(fee)
                await self.session.commit()
                created += 1
            except SQLAlchemyError as e:
                await self.session.rollback()
                failed += 1
                logger.error("Failed to create %d annual fee for %r: %s", year, key, e)

        if created:
            AuditService.log(
                self.session,
                "fee",
                0,
                "generate_annual",
                actor_id=self.actor_id,
                changes={"year": year, "amount": amount, "fees_created": created},
            )
            await self.session.commit()

        logger.info(
            "Annual fee generation for %d: %d created, %d skipped, %d failed",
            year,
            created,
            len(households) - len(pending),
            failed,
        )
        return {
            "success": failed == 0,
            "fees_created": created,
            "failed": failed,
            "message": f"Created {created} annual fees for {year}"
            + (f" ({failed} failed)" if failed else ""),
        }

    async def bulk_update_annual_fee_amount(self, year: int, amount: Decimal) -> dict[str, Any]:
        """Set the amount of every unpaid annual fee for a year.

        Paid fees keep the amount they were settled at.

        Returns:
            {"success", "updated_count", "message"}
        """
        if amount is None or Decimal(amount) <= 0:
            return {"success": False, "updated_count": 0, "message": "Amount must be positive"}

        fees = await self.list_annual_fees(year)
        updated = 0
        for fee in fees:
            if fee.status == ObligationStatus.PAID:
                continue
            fee.amount = Decimal(amount)
            updated += 1

        if updated:
            AuditService.log(
                self.session,
                "fee",
                0,
                "bulk_update_amount",
                actor_id=self.actor_id,
                changes={"year": year, "amount": amount, "updated_count": updated},
            )
        await self.session.commit()
        logger.info("Updated amount of %d annual fees for %d to %s", updated, year, amount)
        return {
            "success": True,
            "updated_count": updated,
            "message": f"Updated {updated} annual fees for {year}",
        }

    async def list_annual_fees(self, year: int) -> list[Fee]:
        result = await self.session.execute(
            select(Fee)
            .where(Fee.frequency == FeeFrequency.ANNUALLY, Fee.year == year)
            .order_by(Fee.id)
        )
        return list(result.scalars().all())

    async def create_fee(
        self,
        name: str,
        amount: Decimal,
        frequency: FeeFrequency,
        due_date: date,
        description: str = "",
        user_id: Optional[int] = None,
        address: Optional[str] = None,
        year: Optional[int] = None,
        reason: Optional[str] = None,
        status: ObligationStatus = ObligationStatus.PENDING,
    ) -> Fee:
        """Create a fee by hand.

        Raises:
            InvalidInputError: If name is empty or amount is not positive
        """
        if not name or not name.strip():
            raise InvalidInputError("Fee name is required")
        if amount is None or Decimal(amount) <= 0:
            raise InvalidInputError("Fee amount must be positive")

        household_id = None
        if address:
            household = await HouseholdService(self.session).get_by_key(address)
            household_id = household.id if household else None

        fee = Fee(
            name=name.strip(),
            amount=Decimal(amount),
            frequency=frequency,
            due_date=due_date,
            description=description,
            is_late=due_date < date.today(),
            user_id=user_id,
            address=address,
            household_id=household_id,
            year=year,
            reason=reason,
            type="Fee",
            status=status,
        )
        self.session.add(fee)
        await self.session.flush()
        AuditService.log(
            self.session,
            "fee",
            fee.id,
            "create",
            actor_id=self.actor_id,
            changes={"name": fee.name, "amount": fee.amount},
        )
        await self.session.commit()
        logger.info("Created fee %d (%s)", fee.id, fee.name)
        return fee

    async def get_fee(self, fee_id: int) -> Optional[Fee]:
        return await self.session.get(Fee, fee_id)

    async def require_fee(self, fee_id: int) -> Fee:
        """Get fee by ID or raise NotFoundError."""
        fee = await self.get_fee(fee_id)
        if fee is None:
            raise NotFoundError("Fee", fee_id)
        return fee

    async def update_fee(self, fee_id: int, **changes: Any) -> Fee:
        """Apply admin edits to a fee.

        Raises:
            NotFoundError: If the fee does not exist
            InvalidInputError: If a field is not editable
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise InvalidInputError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if "amount" in changes and (changes["amount"] is None or Decimal(changes["amount"]) <= 0):
            raise InvalidInputError("Fee amount must be positive")

        fee = await self.require_fee(fee_id)
        for field, value in changes.items():
            setattr(fee, field, value)
        AuditService.log(
            self.session, "fee", fee.id, "update", actor_id=self.actor_id, changes=changes
        )
        await self.session.commit()
        logger.info("Updated fee %d: %s", fee_id, sorted(changes))
        return fee

    async def delete_fee(self, fee_id: int) -> None:
        """Delete a fee, detaching any payments that referenced it.

        Raises:
            NotFoundError: If the fee does not exist
        """
        fee = await self.require_fee(fee_id)
        await self.session.execute(
            update(Payment).where(Payment.fee_id == fee_id).values(fee_id=None)
        )
        await self.session.delete(fee)
        AuditService.log(self.session, "fee", fee_id, "delete", actor_id=self.actor_id)
        await self.session.commit()
        logger.info("Deleted fee %d", fee_id)

    async def list_fees(self) -> list[Fee]:
        """List all fees, newest first."""
        result = await self.session.execute(select(Fee).order_by(Fee.created_at.desc(), Fee.id.desc()))
        return list(result.scalars().all())

    async def list_fees_paginated(self, limit: int = 20, offset: int = 0) -> dict[str, Any]:
        """List fees newest first, one page at a time.

        Returns:
            {"items": [...], "total": int}
        """
        total = await self.session.scalar(select(func.count()).select_from(Fee))
        result = await self.session.execute(
            select(Fee)
            .order_by(Fee.created_at.desc(), Fee.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return {"items": list(result.scalars().all()), "total": total or 0}

    async def add_past_due_amount(
        self, user_id: int, amount: Decimal, description: str, due_date: date
    ) -> Fee:
        """Record a carried-over balance as an overdue one-time fee.

        Raises:
            NotFoundError: If the member does not exist
            InvalidInputError: If amount is not positive
        """
        if amount is None or Decimal(amount) <= 0:
            raise InvalidInputError("Past due amount must be positive")
        member = await MemberService(self.session).require_member(user_id)

        fee = Fee(
            name=f"Past Due: {description}",
            amount=Decimal(amount),
            frequency=FeeFrequency.ONE_TIME,
            due_date=due_date,
            description=description,
            is_late=due_date < date.today(),
            user_id=member.id,
            type="Fee",
            status=ObligationStatus.OVERDUE,
        )
        self.session.add(fee)
        await self.session.flush()
        AuditService.log(
            self.session,
            "fee",
            fee.id,
            "past_due",
            actor_id=self.actor_id,
            changes={"user_id": user_id, "amount": amount},
        )
        await self.session.commit()
        logger.info("Added past due fee %d for member %d", fee.id, user_id)
        return fee


__all__ = ["FeeService", "EDITABLE_FIELDS"]
