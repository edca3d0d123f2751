# deal_checker/services/result_normalizer.py

"""Maps provider raw records onto the canonical DealRecord."""

import logging
from decimal import Decimal
from typing import Any
from urllib.parse import urlencode

from deal_checker.models.deal import DealRecord, Discount
from deal_checker.models.raw_item import (
    KeepaProduct,
    PaapiItem,
    PageSnapshot,
    RawItem,
)
from deal_checker.parsers.asin_parser import canonical_product_url
from deal_checker.parsers.discount_calculator import compute_discount
from deal_checker.parsers.price_parser import (
    from_minor_units,
    normalize_price,
    parse_price_text,
)

logger = logging.getLogger("deal_checker.normalizer")

# Keepa csv type indices inside stats.current / stats.avg90
_KEEPA_AMAZON = 0
_KEEPA_LIST_PRICE = 4


def _dig(data: Any, *path: str | int) -> Any:
    """Walk nested dicts/lists, returning None on any missing step."""
    node = data
    for key in path:
        if isinstance(key, int):
            if not isinstance(node, list) or len(node) <= key:
                return None
        elif not isinstance(node, dict):
            return None
        node = node[key] if isinstance(key, int) else node.get(key)
        if node is None:
            return None
    return node


def _positive(price: Decimal | None) -> bool:
    return price is not None and price > 0


class ResultNormalizer:
    """Builds DealRecords from PaapiItem, KeepaProduct or PageSnapshot."""

    def __init__(self, affiliate_tag: str, domain: str) -> None:
        self.affiliate_tag = affiliate_tag
        self.domain = domain

    # ── Shared helpers ───────────────────────────────────

    def affiliate_link(self, asin: str | None) -> str | None:
        """Canonical product link, tagged when an affiliate tag is set."""
        link = canonical_product_url(asin, self.domain)
        if link is None or not self.affiliate_tag:
            return link
        return f"{link}?{urlencode({'tag': self.affiliate_tag})}"

    def _link(
        self,
        asin: str | None,
        detail_link: str | None,
        reference: str | None,
    ) -> str | None:
        return (
            detail_link
            or reference
            or canonical_product_url(asin, self.domain)
        )

    def _build(
        self,
        asin: str | None,
        raw_title: str | None,
        link: str | None,
        original: Decimal | None,
        current: Decimal | None,
        image: str | None,
        extra_check: bool = False,
    ) -> DealRecord:
        """Assemble a record; any absent core field flags a manual check."""
        need_check = extra_check or any(
            value is None
            for value in (asin, raw_title, image, original, current)
        )
        return DealRecord(
            asin=asin,
            title=raw_title or asin,
            link=link,
            original=original,
            current=current,
            image=image,
            need_check_manually=need_check,
            discount=compute_discount(original, current),
            affiliate_link=self.affiliate_link(asin),
        )

    # ── Per-provider mappings ────────────────────────────

    def _from_paapi(
        self,
        item: PaapiItem,
        reference: str | None,
        image: str | None,
    ) -> DealRecord:
        data = item.data
        listing = _dig(data, "Offers", "Listings", 0)
        current = normalize_price(_dig(listing, "Price", "Amount"))
        original = normalize_price(_dig(listing, "SavingBasis", "Amount"))
        return self._build(
            asin=item.asin,
            raw_title=_dig(data, "ItemInfo", "Title", "DisplayValue"),
            link=self._link(item.asin, data.get("DetailPageURL"), reference),
            original=original,
            current=current,
            image=image or _dig(data, "Images", "Primary", "Large", "URL"),
            extra_check=not (_positive(current) and _positive(original)),
        )

    def _keepa_image(self, data: dict[str, Any]) -> str | None:
        name = _dig(data, "images", 0, "l")
        if not name:
            csv = data.get("imagesCSV")
            name = csv.split(",")[0] if isinstance(csv, str) and csv else None
        if not name:
            return None
        return f"https://m.media-amazon.com/images/I/{name}"

    def _from_keepa(
        self,
        product: KeepaProduct,
        reference: str | None,
        image: str | None,
    ) -> DealRecord:
        data = product.data
        current = from_minor_units(
            _dig(data, "stats", "current", _KEEPA_AMAZON)
        )
        raw_list = _dig(data, "stats", "current", _KEEPA_LIST_PRICE)
        list_price = from_minor_units(raw_list)
        # avg90 stands in only when the list-price slot is missing; -1 is
        # Keepa's "no data" and leaves the original absent
        raw_original = (
            raw_list
            if raw_list is not None
            else _dig(data, "stats", "avg90", _KEEPA_AMAZON)
        )
        original = from_minor_units(raw_original)
        return self._build(
            asin=product.asin,
            raw_title=data.get("title") or None,
            link=self._link(product.asin, None, reference),
            original=original,
            current=current,
            image=image or self._keepa_image(data),
            extra_check=current is None or list_price is None,
        )

    def _from_page(
        self,
        snapshot: PageSnapshot,
        reference: str | None,
        image: str | None,
    ) -> DealRecord:
        current = parse_price_text(snapshot.current_price_text)
        original = parse_price_text(snapshot.original_price_text)
        if original is None and current is not None:
            original = current
        return self._build(
            asin=snapshot.asin,
            raw_title=snapshot.title_text,
            link=reference or snapshot.url or None,
            original=original,
            current=current,
            image=image or snapshot.image_url,
        )

    # ── Public API ───────────────────────────────────────

    def normalize(
        self,
        raw: RawItem,
        reference: str | None = None,
        image: str | None = None,
    ) -> DealRecord:
        """Map one raw record to a DealRecord.

        Args:
            raw: Provider raw record.
            reference: The input line the ASIN was first seen on.
            image: Local image path overriding the provider image URL.
        """
        if isinstance(raw, PaapiItem):
            return self._from_paapi(raw, reference, image)
        if isinstance(raw, KeepaProduct):
            return self._from_keepa(raw, reference, image)
        if isinstance(raw, PageSnapshot):
            return self._from_page(raw, reference, image)
        msg = f"Unsupported raw record type: {type(raw).__name__}"
        raise TypeError(msg)

    @staticmethod
    def passthrough(url: str) -> DealRecord:
        """Record for a line with no ASIN: kept, flagged, nothing known."""
        return DealRecord(
            asin=None,
            title=None,
            link=url,
            original=None,
            current=None,
            image=None,
            need_check_manually=True,
            discount=Discount(has_discount=False),
            affiliate_link=None,
        )
