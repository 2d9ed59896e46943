"""Tests for model column definitions shared with the migrations."""

import pytest
from sqlalchemy import Enum as SQLEnum

from src.models.fee import Fee
from src.models.fine import Fine
from src.models.payment import Payment


@pytest.mark.unit
@pytest.mark.parametrize(
    "column",
    [
        Fee.__table__.c.frequency,
        Fee.__table__.c.status,
        Fine.__table__.c.status,
        Payment.__table__.c.status,
        Payment.__table__.c.payment_method,
        Payment.__table__.c.verification_status,
    ],
    ids=lambda column: f"{column.table.name}.{column.name}",
)
def test_enum_columns_are_plain_strings(column):
    assert isinstance(column.type, SQLEnum)
    assert column.type.native_enum is False


@pytest.mark.unit
@pytest.mark.parametrize("column", ["fee_id", "fine_id"])
def test_payment_links_cleared_on_delete(column):
    (foreign_key,) = Payment.__table__.c[column].foreign_keys
    assert foreign_key.ondelete == "SET NULL"
