# tests/test_price_parser.py

"""Tests for price text, major-unit and minor-unit normalisation."""

import unittest
from decimal import Decimal

from deal_checker.parsers.price_parser import (
    from_minor_units,
    normalize_price,
    parse_price_text,
    round_money,
)


class TestParsePriceText(unittest.TestCase):
    """parse_price_text behaviour."""

    def test_currency_symbol(self) -> None:
        """'$19.99' → 19.99."""
        self.assertEqual(parse_price_text("$19.99"), Decimal("19.99"))

    def test_thousands_separator(self) -> None:
        """Commas are removed before parsing."""
        self.assertEqual(
            parse_price_text("$1,299.00"), Decimal("1299.00")
        )

    def test_surrounding_text(self) -> None:
        """Words and whitespace around the number are dropped."""
        self.assertEqual(
            parse_price_text(" List Price: US$ 45.5 "), Decimal("45.50")
        )

    def test_rounds_to_cents(self) -> None:
        """Values are rounded half-up to two decimals."""
        self.assertEqual(parse_price_text("10.005"), Decimal("10.01"))

    def test_empty_and_none(self) -> None:
        """Empty or missing text is absent."""
        self.assertIsNone(parse_price_text(None))
        self.assertIsNone(parse_price_text(""))
        self.assertIsNone(parse_price_text("Currently unavailable"))

    def test_malformed_number(self) -> None:
        """Two decimal points cannot be parsed."""
        self.assertIsNone(parse_price_text("1.234.56"))

    def test_minus_sign_is_stripped(self) -> None:
        """The result is never negative."""
        self.assertEqual(parse_price_text("-5.00"), Decimal("5.00"))


class TestFromMinorUnits(unittest.TestCase):
    """from_minor_units behaviour."""

    def test_cents_to_dollars(self) -> None:
        """1999 cents → 19.99."""
        self.assertEqual(from_minor_units(1999), Decimal("19.99"))

    def test_zero_and_negative_are_absent(self) -> None:
        """0 and Keepa's -1 'no data' marker are absent."""
        self.assertIsNone(from_minor_units(0))
        self.assertIsNone(from_minor_units(-1))

    def test_non_numeric_is_absent(self) -> None:
        """Strings, bools and None are rejected."""
        self.assertIsNone(from_minor_units("1999"))
        self.assertIsNone(from_minor_units(True))
        self.assertIsNone(from_minor_units(None))

    def test_non_finite_is_absent(self) -> None:
        """NaN and infinity are rejected."""
        self.assertIsNone(from_minor_units(float("nan")))
        self.assertIsNone(from_minor_units(float("inf")))


class TestNormalizePrice(unittest.TestCase):
    """normalize_price dispatch."""

    def test_float(self) -> None:
        """Major-unit floats are rounded to cents."""
        self.assertEqual(normalize_price(24.99), Decimal("24.99"))
        self.assertEqual(normalize_price(3), Decimal("3.00"))

    def test_text(self) -> None:
        """Strings go through text mode."""
        self.assertEqual(normalize_price("$5"), Decimal("5.00"))

    def test_rejects_bad_numbers(self) -> None:
        """Negative, NaN, infinite and bool values are absent."""
        self.assertIsNone(normalize_price(-1.0))
        self.assertIsNone(normalize_price(float("nan")))
        self.assertIsNone(normalize_price(float("-inf")))
        self.assertIsNone(normalize_price(False))
        self.assertIsNone(normalize_price(None))

    def test_zero_is_a_value_not_absent(self) -> None:
        """Zero is kept distinct from an absent price."""
        self.assertEqual(normalize_price(0), Decimal("0.00"))

    def test_idempotent(self) -> None:
        """normalize(normalize(x)) == normalize(x)."""
        for value in ("$1,299.99", "0", 19.999, 7, Decimal("3.14159"), "n/a"):
            with self.subTest(value=value):
                once = normalize_price(value)
                self.assertEqual(normalize_price(once), once)


class TestRoundMoney(unittest.TestCase):
    """round_money uses half-up rounding."""

    def test_half_up(self) -> None:
        """0.125 rounds up to 0.13."""
        self.assertEqual(round_money(Decimal("0.125")), Decimal("0.13"))


if __name__ == "__main__":
    unittest.main()
