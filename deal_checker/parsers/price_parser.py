# deal_checker/parsers/price_parser.py

"""Price normalisation from page text, major units and minor units."""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_CENT = Decimal("0.01")
_NON_PRICE_CHARS_RE = re.compile(r"[^\d.,]")


def round_money(value: Decimal) -> Decimal:
    """Round to two decimal places, halves away from zero."""
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def _to_decimal(value: object) -> Decimal | None:
    """Convert a numeric value to a finite Decimal, or None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, (int, float)):
        try:
            number = Decimal(str(value))
        except InvalidOperation:
            return None
    else:
        return None
    if not number.is_finite():
        return None
    return number


def parse_price_text(text: str | None) -> Decimal | None:
    """Extract a price from text such as ``'$1,299.99'``.

    Everything except digits, dots and commas is dropped, commas are
    removed, and the rest must parse as a finite number.
    """
    if not text:
        return None
    cleaned = _NON_PRICE_CHARS_RE.sub("", text).replace(",", "")
    if not cleaned:
        return None
    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return round_money(number)


def from_minor_units(value: object) -> Decimal | None:
    """Convert an integer cent amount to currency units (``1999`` → 19.99)."""
    number = _to_decimal(value)
    if number is None or number <= 0:
        return None
    return round_money(number / 100)


def normalize_price(value: object) -> Decimal | None:
    """Normalise text or a major-unit number into a 2-dp price.

    Negative or non-finite numbers are rejected; text goes through
    :func:`parse_price_text`.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return parse_price_text(value)
    number = _to_decimal(value)
    if number is None or number < 0:
        return None
    return round_money(number)
