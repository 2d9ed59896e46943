"""Tests for locale-aware money formatting (default en_US locale)."""

from decimal import Decimal

import pytest

from src.services.locale_service import CURRENCY, LOCALE, format_amount

pytestmark = [
    pytest.mark.unit,
    pytest.mark.skipif(LOCALE != "en_US", reason="expectations assume en_US"),
]


def test_currency_follows_territory():
    assert CURRENCY == "USD"


def test_format_amount_with_symbol():
    assert format_amount(Decimal("300")) == "$300.00"
    assert format_amount(1234.5) == "$1,234.50"


def test_format_amount_without_symbol():
    assert format_amount(Decimal("1234.56"), include_symbol=False) == "1,234.56"
