"""Tests for notification records, Telegram push and fire-and-forget dispatch."""

from unittest.mock import patch

import pytest
from sqlalchemy import select
from telegram.error import TelegramError

from src.models.notification import NotificationType, UserNotification
from src.services.member_service import MemberService
from src.services.notification_service import (
    Audience,
    NotificationDispatcher,
    NotificationService,
    build_bot,
)


class DummyBot:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def send_message(self, chat_id, text, reply_markup=None, parse_mode=None):
        if self.fail:
            raise TelegramError("Forbidden: bot was blocked by the user")
        self.sent.append({"chat_id": chat_id, "text": text, "parse_mode": parse_mode})


async def _roster(session):
    service = MemberService(session)
    board = await service.create_member(
        "Bea", "Board", "bea@example.com", "1 Elm St", is_board_member=True, telegram_id="111"
    )
    inactive_board = await service.create_member(
        "Ivan", "Idle", "ivan@example.com", "2 Elm St", is_board_member=True
    )
    inactive_board.is_active = False
    resident = await service.create_member("Rae", "Resident", "rae@example.com", "3 Elm St")
    await session.commit()
    return board, inactive_board, resident


async def _notifications(session):
    result = await session.execute(select(UserNotification).order_by(UserNotification.id))
    return list(result.scalars().all())


@pytest.mark.unit
async def test_dispatch_to_explicit_members(session):
    board, _, resident = await _roster(session)
    service = NotificationService(session)

    count = await service.dispatch(
        [resident.id, 9999], NotificationType.PAYMENT_VERIFIED, "Payment verified", "Thanks!",
        {"payment_id": 5},
    )

    assert count == 1
    rows = await _notifications(session)
    assert [(n.user_id, n.type, n.data) for n in rows] == [
        (resident.id, "payment_verified", {"payment_id": 5})
    ]
    assert rows[0].is_read is False


@pytest.mark.unit
async def test_board_audience_skips_inactive(session):
    board, inactive_board, _ = await _roster(session)

    count = await NotificationService(session).dispatch(
        Audience.BOARD_MEMBERS, NotificationType.PAYMENT_PENDING, "Pending", "Please review"
    )

    assert count == 1
    assert [n.user_id for n in await _notifications(session)] == [board.id]


@pytest.mark.unit
async def test_all_residents_audience(session):
    board, _, resident = await _roster(session)

    count = await NotificationService(session).dispatch(
        Audience.ALL_RESIDENTS, "announcement", "Meeting", "Annual meeting on Friday"
    )

    assert count == 2
    assert {n.user_id for n in await _notifications(session)} == {board.id, resident.id}


@pytest.mark.unit
async def test_push_sent_to_members_with_telegram_id(session):
    board, _, resident = await _roster(session)
    bot = DummyBot()

    await NotificationService(session, bot=bot).dispatch(
        [board.id, resident.id], NotificationType.PAYMENT_RECORDED, "Recorded", "Check received"
    )

    assert bot.sent == [
        {"chat_id": 111, "text": "<b>Recorded</b>\nCheck received", "parse_mode": "HTML"}
    ]


@pytest.mark.unit
async def test_push_failure_is_logged_not_raised(session, caplog):
    board, _, _ = await _roster(session)

    count = await NotificationService(session, bot=DummyBot(fail=True)).dispatch(
        [board.id], NotificationType.FINE, "Fine", "New fine"
    )

    assert count == 1
    assert len(await _notifications(session)) == 1
    assert "bot was blocked" in caplog.text


def test_build_bot_requires_token():
    assert build_bot("") is None


class TestNotificationDispatcher:
    @pytest.mark.unit
    async def test_fire_and_drain(self, session_factory):
        async with session_factory() as setup:
            _, _, resident = await _roster(setup)
            resident_id = resident.id

        dispatcher = NotificationDispatcher(session_factory)
        task = dispatcher.fire([resident_id], NotificationType.PAYMENT_VERIFIED, "Verified", "OK")
        assert task is not None

        await dispatcher.drain()

        assert dispatcher.pending == 0
        async with session_factory() as check:
            rows = await _notifications(check)
        assert [n.user_id for n in rows] == [resident_id]

    @pytest.mark.unit
    async def test_failure_is_logged(self, session_factory, caplog):
        dispatcher = NotificationDispatcher(session_factory)

        with patch.object(
            NotificationService, "dispatch", side_effect=RuntimeError("database is locked")
        ):
            dispatcher.fire([1], NotificationType.FINE, "Fine", "New fine")
            await dispatcher.drain()

        assert "Notification dispatch failed" in caplog.text
        assert "database is locked" in caplog.text

    def test_fire_without_running_loop_returns_none(self, caplog):
        dispatcher = NotificationDispatcher(session_factory=None)

        assert dispatcher.fire([1], NotificationType.FINE, "Fine", "New fine") is None
        assert "Cannot schedule" in caplog.text


@pytest.mark.unit
async def test_list_unread_newest_first(session):
    _, _, resident = await _roster(session)
    service = NotificationService(session)
    await service.dispatch([resident.id], NotificationType.FINE, "Fine", "First")
    await service.dispatch([resident.id], NotificationType.FINE, "Fine", "Second")
    first = (await _notifications(session))[0]
    first.is_read = True
    await session.commit()

    unread = await service.list_unread(resident.id)

    assert [n.body for n in unread] == ["Second"]
