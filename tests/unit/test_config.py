"""Unit tests for configuration loading."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from src.config.settings import AppSettings, get_settings, reset_settings


class TestAppSettings:
    def test_defaults(self, monkeypatch):
        for key in (
            "DEFAULT_ANNUAL_FEE_AMOUNT",
            "ANNUAL_FEE_TYPE_PREFIX",
            "ADMIN_PAYMENT_SETTLES_ALL_OUTSTANDING",
        ):
            monkeypatch.delenv(key, raising=False)

        settings = AppSettings(_env_file=None)

        assert settings.default_annual_fee_amount == Decimal("300.00")
        assert settings.annual_fee_type_prefix == "Annual HOA Fee"
        assert settings.admin_payment_settles_all_outstanding is True

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_ANNUAL_FEE_AMOUNT", "450")
        monkeypatch.setenv("ADMIN_PAYMENT_SETTLES_ALL_OUTSTANDING", "false")

        settings = AppSettings(_env_file=None)

        assert settings.default_annual_fee_amount == Decimal("450")
        assert settings.admin_payment_settles_all_outstanding is False

    def test_invalid_boolean_rejected(self, monkeypatch):
        monkeypatch.setenv("ADMIN_PAYMENT_SETTLES_ALL_OUTSTANDING", "sometimes")

        with pytest.raises(ValidationError):
            AppSettings(_env_file=None)

    def test_validate_rejects_non_positive_amount(self):
        settings = AppSettings(_env_file=None, default_annual_fee_amount=Decimal("0"))

        with pytest.raises(ValueError, match="DEFAULT_ANNUAL_FEE_AMOUNT"):
            settings.validate()


def test_get_settings_is_cached_until_reset(monkeypatch):
    monkeypatch.setenv("ANNUAL_FEE_TYPE_PREFIX", "Dues")
    reset_settings()
    first = get_settings()

    assert get_settings() is first
    assert first.annual_fee_type_prefix == "Dues"

    monkeypatch.setenv("ANNUAL_FEE_TYPE_PREFIX", "Annual HOA Fee")
    reset_settings()
    assert get_settings().annual_fee_type_prefix == "Annual HOA Fee"
