"""Tests for MemberService roster queries."""

import pytest

from src.services.errors import InvalidInputError, NotFoundError
from src.services.member_service import MemberService


@pytest.mark.unit
async def test_create_member_normalizes_input(session):
    member = await MemberService(session).create_member(
        " Pat ", "Doe", " Pat.Doe@Example.com ", " 1 Elm St ", unit_number=" "
    )

    assert member.first_name == "Pat"
    assert member.email == "pat.doe@example.com"
    assert member.address == "1 Elm St"
    assert member.unit_number is None
    assert member.household_id is not None
    assert member.is_homeowner is True


@pytest.mark.unit
@pytest.mark.parametrize(
    "first, email, address", [("", "a@example.com", "1 Elm"), ("Pat", " ", "1 Elm"), ("Pat", "a@example.com", "")]
)
async def test_create_member_requires_fields(session, first, email, address):
    with pytest.raises(InvalidInputError):
        await MemberService(session).create_member(first, "Doe", email, address)


@pytest.mark.unit
async def test_role_queries(session, make_member):
    owner = await make_member("Olive", address="1 Elm St")
    board = await make_member("Bea", address="2 Elm St", is_board_member=True)
    renter = await make_member("Ray", address="3 Elm St", is_renter=True)
    retired = await make_member("Rita", address="4 Elm St", is_board_member=True)
    retired.is_active = False
    await session.commit()
    service = MemberService(session)

    assert [m.id for m in await service.list_homeowners()] == [owner.id, board.id, retired.id]
    assert [m.id for m in await service.list_active_board_members()] == [board.id]
    assert {m.id for m in await service.list_active_members()} == {owner.id, board.id, renter.id}
    assert len(await service.list_members()) == 4


@pytest.mark.unit
async def test_block_and_unblock(session, make_member):
    member = await make_member()
    service = MemberService(session)

    blocked = await service.set_block_status(member.id, True, "Spam")
    assert blocked.is_blocked is True
    assert blocked.block_reason == "Spam"

    unblocked = await service.set_block_status(member.id, False, "ignored")
    assert unblocked.is_blocked is False
    assert unblocked.block_reason is None


@pytest.mark.unit
async def test_require_member_not_found(session):
    with pytest.raises(NotFoundError, match="Member 3 not found"):
        await MemberService(session).require_member(3)
