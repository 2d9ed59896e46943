"""Money formatting for result messages and notifications.

The LOCALE env var (default en_US) picks the number format; the currency
is the first one babel lists for the locale's territory.

Example:
    >>> from src.services.locale_service import format_amount
    >>> format_amount(1234.5)
    '$1,234.50'
"""

import logging
import os
from decimal import Decimal

from babel import Locale, UnknownLocaleError
from babel.numbers import format_currency, format_decimal, get_territory_currencies

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en_US"
DEFAULT_CURRENCY = "USD"


def _resolve_locale() -> tuple[str, str]:
    """Return (locale, currency code), falling back to en_US/USD."""
    locale_str = os.getenv("LOCALE", DEFAULT_LOCALE)
    try:
        locale = Locale.parse(locale_str)
    except (UnknownLocaleError, ValueError) as e:
        logger.warning("Invalid LOCALE %r: %s; using %s", locale_str, e, DEFAULT_LOCALE)
        return DEFAULT_LOCALE, DEFAULT_CURRENCY

    currencies = get_territory_currencies(locale.territory) if locale.territory else []
    return locale_str, currencies[0] if currencies else DEFAULT_CURRENCY


LOCALE, CURRENCY = _resolve_locale()


def format_amount(amount: float | Decimal, include_symbol: bool = True) -> str:
    """Format a dues amount, e.g. '$300.00' or '1,234.56' without the symbol."""
    if include_symbol:
        return format_currency(Decimal(amount), CURRENCY, locale=LOCALE)
    return format_decimal(Decimal(amount), format="#,##0.00", locale=LOCALE)


__all__ = ["LOCALE", "CURRENCY", "format_amount"]
