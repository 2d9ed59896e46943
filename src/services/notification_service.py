"""Notification service: in-app notification records plus optional Telegram push."""

import asyncio
import logging
from enum import Enum
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from telegram import Bot
from telegram.error import TelegramError

from src.models.member import Member
from src.models.notification import NotificationType, UserNotification
from src.services.errors import CollaboratorError

logger = logging.getLogger(__name__)


class Audience(str, Enum):
    """Named recipient groups resolved at dispatch time."""

    BOARD_MEMBERS = "board_members"
    ALL_RESIDENTS = "all_residents"


Recipients = list[int] | Audience


def build_bot(token: str) -> Optional[Bot]:
    """Create a Telegram bot for push delivery, or None when no token is configured."""
    if not token:
        return None
    return Bot(token=token)


class NotificationService:
    """Service for delivering notifications to members.

    Every recipient gets a UserNotification row. When a Telegram bot is
    configured, members with a telegram_id also get a push message; push
    failures are logged and do not reduce the returned count.
    """

    def __init__(self, session: AsyncSession, bot: Optional[Bot] = None):
        self.session = session
        self.bot = bot

    async def send_message(self, chat_id: str, text: str, parse_mode: str = "HTML") -> None:
        """Send message to a Telegram chat.

        Raises:
            CollaboratorError: If no bot is configured or Telegram rejects the message
        """
        if self.bot is None:
            raise CollaboratorError("Telegram bot is not configured")
        try:
            await self.bot.send_message(chat_id=int(chat_id), text=text, parse_mode=parse_mode)
        except (TelegramError, ValueError) as e:
            raise CollaboratorError(f"Error sending message to {chat_id}: {e}") from e

    async def resolve_recipients(self, recipients: Recipients) -> list[Member]:
        """Load active members for an audience, or the listed members."""
        if recipients == Audience.BOARD_MEMBERS:
            stmt = select(Member).where(
                Member.is_board_member.is_(True), Member.is_active.is_(True)
            )
        elif recipients == Audience.ALL_RESIDENTS:
            stmt = select(Member).where(Member.is_active.is_(True))
        else:
            if not recipients:
                return []
            stmt = select(Member).where(Member.id.in_(set(recipients)))
        result = await self.session.execute(stmt.order_by(Member.id))
        return list(result.scalars().all())

    async def dispatch(
        self,
        recipients: Recipients,
        type: NotificationType | str,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> int:
        """Create notification records for recipients and push where possible.

        Args:
            recipients: Member IDs or an Audience
            type: Notification type
            title: Short title
            body: Message text
            data: Extra payload stored with the notification

        Returns:
            Number of notifications created
        """
        members = await self.resolve_recipients(recipients)
        if not members:
            logger.debug("No recipients for %s notification %r", type, title)
            return 0

        type_value = type.value if isinstance(type, Enum) else type
        for member in members:
            self.session.add(
                UserNotification(
                    user_id=member.id,
                    type=type_value,
                    title=title,
                    body=body,
                    data=data or {},
                    is_read=False,
                )
            )
        await self.session.commit()

        if self.bot is not None:
            for member in members:
                if not member.telegram_id:
                    continue
                try:
                    await self.send_message(member.telegram_id, f"<b>{title}</b>\n{body}")
                except CollaboratorError as e:
                    logger.warning("Push to member %d failed: %s", member.id, e)

        logger.info("Dispatched %s notification to %d member(s)", type_value, len(members))
        return len(members)

    async def list_unread(self, member_id: int) -> list[UserNotification]:
        result = await self.session.execute(
            select(UserNotification)
            .where(UserNotification.user_id == member_id, UserNotification.is_read.is_(False))
            .order_by(UserNotification.id.desc())
        )
        return list(result.scalars().all())


class NotificationDispatcher:
    """Fire-and-forget front end for NotificationService.

    Each dispatch runs as an asyncio task with its own session, after the
    caller's ledger write has committed. Failures surface only in the log.
    """

    def __init__(self, session_factory: async_sessionmaker, bot: Optional[Bot] = None):
        self.session_factory = session_factory
        self.bot = bot
        self._tasks: set[asyncio.Task] = set()

    def fire(
        self,
        recipients: Recipients,
        type: NotificationType | str,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> Optional[asyncio.Task]:
        """Schedule a dispatch; never raises."""
        try:
            task = asyncio.get_running_loop().create_task(
                self._run(recipients, type, title, body, data)
            )
        except RuntimeError as e:
            logger.error("Cannot schedule %s notification: %s", type, e)
            return None
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    async def _run(self, recipients, type, title, body, data) -> int:
        async with self.session_factory() as session:
            return await NotificationService(session, self.bot).dispatch(
                recipients, type, title, body, data
            )

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Notification task cancelled")
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Notification dispatch failed: %s", exc, exc_info=exc)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for all scheduled dispatches to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


__all__ = [
    "Audience",
    "NotificationDispatcher",
    "NotificationService",
    "Recipients",
    "build_bot",
]
