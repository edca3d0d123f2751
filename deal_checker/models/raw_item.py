# deal_checker/models/raw_item.py

"""Provider-specific raw records, one variant per provider.

Provider clients return these untouched; only the result normalizer
knows how to map them onto a DealRecord.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class PaapiItem:
    """One entry of a GetItems ``ItemsResult.Items`` array."""

    asin: str | None
    data: dict[str, Any] = field(default_factory=lambda: dict[str, Any]())


@dataclass(frozen=True)
class KeepaProduct:
    """One entry of a Keepa ``products`` array (requested with stats=1)."""

    asin: str | None
    data: dict[str, Any] = field(default_factory=lambda: dict[str, Any]())


@dataclass(frozen=True)
class PageSnapshot:
    """Raw text pulled off a rendered product page."""

    asin: str | None
    url: str
    title_text: str | None = None
    current_price_text: str | None = None
    original_price_text: str | None = None
    image_url: str | None = None


RawItem = PaapiItem | KeepaProduct | PageSnapshot
