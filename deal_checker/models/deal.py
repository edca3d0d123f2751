# deal_checker/models/deal.py

"""Deal record data model for inter-module data flow."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any


def _as_number(value: Decimal | None) -> float | None:
    """Render an optional 2-dp Decimal as a JSON number."""
    return None if value is None else float(value)


@dataclass(frozen=True)
class Discount:
    """Discount derived from an (original, current) price pair."""

    has_discount: bool
    percentage: Decimal | None = None
    saved_amount: Decimal | None = None


@dataclass(frozen=True)
class DealRecord:
    """One product's pricing/discount state, as written to disk."""

    asin: str | None
    title: str | None
    link: str | None
    original: Decimal | None
    current: Decimal | None
    image: str | None
    need_check_manually: bool
    discount: Discount
    affiliate_link: str | None = None

    @property
    def sort_key(self) -> tuple[Decimal, bool]:
        """Ranking key: percentage (absent counts as 0), then known before absent."""
        pct = self.discount.percentage
        return (pct or Decimal("0"), pct is not None)

    def to_dict(self) -> dict[str, Any]:
        """Serialise using the canonical output field names."""
        return {
            "ASIN": self.asin,
            "Title": self.title,
            "Link": self.link,
            "Original": _as_number(self.original),
            "Current": _as_number(self.current),
            "Image": self.image,
            "NeedCheckManually": self.need_check_manually,
            "HasDiscount": self.discount.has_discount,
            "DiscountPct": _as_number(self.discount.percentage),
            "YouSave": _as_number(self.discount.saved_amount),
            "AffiliateLink": self.affiliate_link,
        }
