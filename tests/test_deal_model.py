# tests/test_deal_model.py

"""Tests for the DealRecord and Discount dataclasses."""

import unittest
from dataclasses import FrozenInstanceError
from decimal import Decimal

from deal_checker.models.deal import DealRecord, Discount


def _record(**overrides: object) -> DealRecord:
    fields: dict[str, object] = {
        "asin": "B000111222",
        "title": "Desk Lamp",
        "link": "https://www.amazon.com/dp/B000111222",
        "original": Decimal("40.00"),
        "current": Decimal("30.00"),
        "image": "https://m.media-amazon.com/images/I/lamp.jpg",
        "need_check_manually": False,
        "discount": Discount(True, Decimal("25.00"), Decimal("10.00")),
    }
    fields.update(overrides)
    return DealRecord(**fields)  # type: ignore[arg-type]


class TestDealRecord(unittest.TestCase):
    """DealRecord behaviour."""

    def test_to_dict_keys(self) -> None:
        """The output schema uses the canonical field names."""
        self.assertEqual(
            list(_record().to_dict()),
            [
                "ASIN",
                "Title",
                "Link",
                "Original",
                "Current",
                "Image",
                "NeedCheckManually",
                "HasDiscount",
                "DiscountPct",
                "YouSave",
                "AffiliateLink",
            ],
        )

    def test_to_dict_numbers(self) -> None:
        """Decimals are written as JSON numbers, absent as null."""
        data = _record(original=None, discount=Discount(False)).to_dict()
        self.assertIsNone(data["Original"])
        self.assertEqual(data["Current"], 30.0)
        self.assertIsNone(data["DiscountPct"])
        self.assertFalse(data["HasDiscount"])

    def test_sort_key(self) -> None:
        """Absent percentage ranks as 0, flagged as unknown."""
        self.assertEqual(_record().sort_key, (Decimal("25.00"), True))
        self.assertEqual(
            _record(discount=Discount(False)).sort_key, (Decimal("0"), False)
        )

    def test_zero_outranks_absent(self) -> None:
        """A known 0% sorts above an absent percentage."""
        zero = _record(discount=Discount(False, Decimal("0.00"), Decimal("0.00")))
        absent = _record(discount=Discount(False))
        self.assertGreater(zero.sort_key, absent.sort_key)

    def test_frozen(self) -> None:
        """Records are immutable once built."""
        record = _record()
        with self.assertRaises(FrozenInstanceError):
            record.title = "other"  # type: ignore[misc]


if __name__ == "__main__":
    unittest.main()
