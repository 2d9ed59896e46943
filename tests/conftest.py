"""Pytest configuration: isolated in-memory databases and member factories."""

import itertools
import os

# Set test configuration BEFORE any imports from src
# The module-level engine in src.services must never touch a real database
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "")

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.config.settings import reset_settings  # noqa: E402
from src.models import Base  # noqa: E402
from src.services.member_service import MemberService  # noqa: E402

_emails = itertools.count(1)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Re-read settings for every test so monkeypatched env vars apply."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
async def session_factory():
    """Session factory bound to a fresh in-memory database."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def session(session_factory):
    """Create async test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def dispatcher():
    """Stand-in NotificationDispatcher recording fire() calls."""
    return MagicMock()


@pytest.fixture
def make_member(session):
    """Factory creating members through MemberService."""

    async def _make(
        first_name: str = "Pat",
        last_name: str = "Doe",
        address: str = "1 Elm St",
        unit_number: str | None = None,
        **kwargs,
    ):
        email = kwargs.pop("email", f"member{next(_emails)}@example.com")
        return await MemberService(session).create_member(
            first_name=first_name,
            last_name=last_name,
            email=email,
            address=address,
            unit_number=unit_number,
            **kwargs,
        )

    return _make
