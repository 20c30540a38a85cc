"""
Currency precision table.

The engine works in one currency per deployment (CAD unless configured
otherwise). This module only knows which ISO 4217 codes are accepted and
how many decimal places each one rounds to.
"""

from types import MappingProxyType

DECIMAL_PLACES = MappingProxyType({
    "CAD": 2,
    "USD": 2,
    "EUR": 2,
    "GBP": 2,
    "AUD": 2,
    "NZD": 2,
    "CHF": 2,
    "MXN": 2,
    "JPY": 0,
    "KRW": 0,
    "ISK": 0,
    "BHD": 3,
    "KWD": 3,
    "OMR": 3,
})


def _clean(code: object) -> str:
    return code.upper().strip() if isinstance(code, str) else ""


def is_supported(code: str) -> bool:
    return _clean(code) in DECIMAL_PLACES


def decimal_places(code: str) -> int:
    """Rounding precision for ``code``; ValueError if unsupported."""
    try:
        return DECIMAL_PLACES[_clean(code)]
    except KeyError:
        raise ValueError(f"Unsupported currency code: {code!r}") from None


def normalize_currency_code(code: str) -> str:
    """Validate and uppercase a currency code read from configuration."""
    cleaned = _clean(code)
    if len(cleaned) != 3:
        raise ValueError(f"Currency code must be 3 letters: {code!r}")
    if cleaned not in DECIMAL_PLACES:
        raise ValueError(f"Unsupported ISO 4217 currency code: {code!r}")
    return cleaned
