"""Fine service for issuing and settling violation fines."""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.fee import ObligationStatus
from src.models.fine import Fine
from src.models.notification import NotificationType
from src.services.audit_service import AuditService
from src.services.errors import InvalidInputError, NotFoundError
from src.services.locale_service import format_amount
from src.services.member_service import MemberService
from src.services.payment_service import unpaid

logger = logging.getLogger(__name__)


class FineService:
    """Service for fine operations."""

    def __init__(self, session: AsyncSession, dispatcher=None, actor_id: Optional[int] = None):
        """Initialize fine service.

        Args:
            session: Async database session
            dispatcher: NotificationDispatcher used to tell members about new fines
            actor_id: Admin member performing the actions
        """
        self.session = session
        self.dispatcher = dispatcher
        self.actor_id = actor_id

    async def add_fine(
        self,
        address: str,
        member_id: int,
        amount: Decimal,
        reason: str,
        description: Optional[str] = None,
    ) -> dict[str, Any]:
        """Issue a pending fine to one member.

        Args:
            address: Address the violation was observed at (logged only)
            member_id: Member receiving the fine
            amount: Fine amount
            reason: Violation; stored as the fine's violation text
            description: Optional detail, defaults to "Fine for {reason}"

        Returns:
            {"success", "fine_id", "message"}

        Raises:
            InvalidInputError: If reason is empty or amount is not positive
            NotFoundError: If the member does not exist
        """
        if not reason or not reason.strip():
            raise InvalidInputError("Fine reason is required")
        if amount is None or Decimal(amount) <= 0:
            raise InvalidInputError("Fine amount must be positive")
        await MemberService(self.session).require_member(member_id)

        fine = Fine(
            violation=reason.strip(),
            amount=Decimal(amount),
            date_issued=date.today(),
            status=ObligationStatus.PENDING,
            description=description or f"Fine for {reason.strip()}",
            resident_id=member_id,
        )
        self.session.add(fine)
        await self.session.flush()
        AuditService.log(
            self.session,
            "fine",
            fine.id,
            "create",
            actor_id=self.actor_id,
            changes={"resident_id": member_id, "amount": fine.amount, "address": address},
        )
        await self.session.commit()
        logger.info("Issued fine %d to member %d at %r: %s", fine.id, member_id, address, reason)

        if self.dispatcher is not None:
            self.dispatcher.fire(
                [member_id],
                NotificationType.FINE,
                "New fine issued",
                f"A fine of {format_amount(fine.amount)} was issued: {fine.violation}",
                {"fine_id": fine.id},
            )

        return {"success": True, "fine_id": fine.id, "message": "Fine added successfully"}

    async def get_fine(self, fine_id: int) -> Optional[Fine]:
        return await self.session.get(Fine, fine_id)

    async def require_fine(self, fine_id: int) -> Fine:
        """Get fine by ID or raise NotFoundError."""
        fine = await self.get_fine(fine_id)
        if fine is None:
            raise NotFoundError("Fine", fine_id)
        return fine

    async def update_fine_status(self, fine_id: int, status: ObligationStatus) -> dict[str, Any]:
        """Set a fine's status.

        Raises:
            NotFoundError: If the fine does not exist
            InvalidInputError: If status is not a known obligation status
        """
        try:
            target = ObligationStatus(status)
        except ValueError as e:
            raise InvalidInputError(f"Unknown fine status: {status!r}") from e
        fine = await self.require_fine(fine_id)
        previous = fine.status
        fine.status = target
        AuditService.log(
            self.session,
            "fine",
            fine.id,
            "update_status",
            actor_id=self.actor_id,
            changes={"from": previous, "to": fine.status},
        )
        await self.session.commit()
        logger.info("Fine %d status %s -> %s", fine_id, previous, fine.status)
        return {"success": True, "message": f"Fine status updated to {fine.status.value}"}

    async def list_fines(self) -> list[Fine]:
        """List all fines, newest first."""
        result = await self.session.execute(
            select(Fine).order_by(Fine.date_issued.desc(), Fine.id.desc())
        )
        return list(result.scalars().all())

    async def list_member_fines(self, member_id: int) -> list[Fine]:
        """List a member's fines, newest first."""
        result = await self.session.execute(
            select(Fine)
            .where(Fine.resident_id == member_id)
            .order_by(Fine.date_issued.desc(), Fine.id.desc())
        )
        return list(result.scalars().all())

    async def list_unpaid_fines(self, member_id: int) -> list[Fine]:
        result = await self.session.execute(
            select(Fine)
            .where(Fine.resident_id == member_id, unpaid(Fine.status))
            .order_by(Fine.date_issued, Fine.id)
        )
        return list(result.scalars().all())


__all__ = ["FineService"]
