"""Tests for household key derivation and Household rows."""

import pytest
from sqlalchemy import func, select

from src.models.household import Household
from src.models.member import Member
from src.services.household_service import HouseholdService, group_homeowners, household_key


def _member(member_id, address, unit=None, is_resident=True, is_renter=False):
    return Member(
        id=member_id,
        first_name=f"M{member_id}",
        last_name="Test",
        email=f"m{member_id}@example.com",
        address=address,
        unit_number=unit,
        is_resident=is_resident,
        is_renter=is_renter,
    )


class TestHouseholdKey:
    def test_address_only(self):
        assert household_key("12 Oak St") == "12 Oak St"

    def test_unit_appended(self):
        assert household_key("12 Oak St", "4B") == "12 Oak St Unit 4B"

    @pytest.mark.parametrize("unit", [None, ""])
    def test_empty_unit_ignored(self, unit):
        assert household_key("12 Oak St", unit) == "12 Oak St"


class TestGroupHomeowners:
    def test_groups_by_key_in_roster_order(self):
        members = [
            _member(1, "1 Elm St"),
            _member(2, "2 Elm St"),
            _member(3, "1 Elm St"),
        ]

        groups = group_homeowners(members)

        assert list(groups) == ["1 Elm St", "2 Elm St"]
        assert [m.id for m in groups["1 Elm St"]] == [1, 3]

    def test_units_are_separate_households(self):
        groups = group_homeowners([_member(1, "9 Pine Ct", "A"), _member(2, "9 Pine Ct", "B")])

        assert set(groups) == {"9 Pine Ct Unit A", "9 Pine Ct Unit B"}

    def test_renters_and_non_residents_dropped(self):
        members = [
            _member(1, "1 Elm St", is_renter=True),
            _member(2, "1 Elm St", is_resident=False),
            _member(3, "1 Elm St"),
        ]

        groups = group_homeowners(members)

        assert [m.id for m in groups["1 Elm St"]] == [3]


@pytest.mark.unit
async def test_get_or_create_reuses_existing_household(session):
    service = HouseholdService(session)

    first = await service.get_or_create("5 Birch Rd", "2")
    second = await service.get_or_create("5 Birch Rd", "2")
    await session.commit()

    assert first.id == second.id
    assert first.key == "5 Birch Rd Unit 2"
    count = await session.scalar(select(func.count()).select_from(Household))
    assert count == 1


@pytest.mark.unit
async def test_members_at_same_address_share_household(make_member):
    alice = await make_member("Alice", "Smith", address="7 Cedar Ln")
    bob = await make_member("Bob", "Smith", address="7 Cedar Ln")
    carol = await make_member("Carol", "Jones", address="7 Cedar Ln", unit_number="1")

    assert alice.household_id == bob.household_id
    assert carol.household_id != alice.household_id
    assert alice.household_key == "7 Cedar Ln"
