# deal_checker/providers/page_provider.py

"""Direct product-page fetcher (the non-API "page renderer")."""

import json
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests

from deal_checker.models.raw_item import PageSnapshot
from deal_checker.parsers.asin_parser import canonical_product_url
from deal_checker.providers.base_provider import BaseProvider


class PageProvider(BaseProvider):
    """Fetches ``/dp/<ASIN>`` pages and pulls raw title/price/image text.

    A page that cannot be fetched (HTTP error, robot check, network
    failure on both transports) yields an empty snapshot, which the
    normalizer turns into a needs-manual-check record.
    """

    MAX_BATCH = 1

    def __init__(self) -> None:
        super().__init__("page")
        self.selectors: dict[str, Any] = self._load_selectors()
        self.domain = self.settings.AFFILIATE_DOMAIN

    def _load_selectors(self) -> dict[str, Any]:
        """Load product-page CSS selectors from selectors.json."""
        with open(self.settings.SELECTORS_PATH, encoding="utf-8") as f:
            all_selectors: dict[str, Any] = json.load(f)
        result: dict[str, Any] = all_selectors.get("amazon_product", {})
        return result

    def _validate_response(self, text: str) -> bool:
        """Reject robot-check pages."""
        lower = text.lower()
        for keyword in self.settings.CAPTCHA_KEYWORDS:
            if keyword in lower:
                self.logger.warning(
                    "[page] Robot check detected (keyword '%s')",
                    keyword,
                )
                return False
        return True

    def _get_page(self, url: str) -> BeautifulSoup | None:
        """Fetch a page, falling back to cloudscraper on failure."""
        headers: dict[str, str] = {
            **self.settings.DEFAULT_HEADERS,
            "Referer": f"https://{self.domain}/",
        }

        # Primary: curl_cffi (browser-impersonating TLS)
        try:
            resp = self.session.get(
                url,
                headers=headers,
                timeout=self._request_timeout,
            )
            if resp.status_code != 200:
                self.logger.warning(
                    "[page] HTTP %d for %s", resp.status_code, url
                )
            elif self._validate_response(resp.text):
                return BeautifulSoup(resp.text, "lxml")
            else:
                self.logger.warning(
                    "[page] Robot check served instead of %s", url
                )
        except curl_requests.RequestsError as exc:
            self.logger.warning(
                "[page] Request error for %s: %s", url, exc
            )

        # Fallback: cloudscraper (JS challenge solver)
        self.logger.info(
            "[page] curl_cffi failed, falling back to cloudscraper"
        )
        try:
            _cs: Any = cloudscraper
            scraper: Any = _cs.create_scraper()
            fallback_resp: Any = scraper.get(
                url,
                headers=headers,
                proxies=self._proxies(),
                timeout=self._request_timeout,
            )
            text = str(fallback_resp.text)
            if fallback_resp.status_code == 200 and self._validate_response(
                text
            ):
                return BeautifulSoup(text, "lxml")
        except Exception as e:
            self.logger.error(
                "[page] cloudscraper fallback also failed: %s",
                e,
                exc_info=True,
            )
        return None

    def _first_text(
        self, soup: BeautifulSoup, selectors: list[str],
    ) -> str | None:
        """Return the stripped text of the first selector that matches."""
        for selector in selectors:
            el = soup.select_one(selector)
            if el is not None:
                text = el.get_text(strip=True)
                if text:
                    return text
        return None

    def _image_url(self, soup: BeautifulSoup) -> str | None:
        """Return the main product image URL, preferring the hi-res one."""
        for selector in self.selectors.get("image", []):
            el = soup.select_one(selector)
            if el is None:
                continue
            for attr in ("data-old-hires", "src"):
                value = el.get(attr)
                if isinstance(value, str) and value.startswith("http"):
                    return value
        return None

    def parse_page(
        self, soup: BeautifulSoup, asin: str, url: str,
    ) -> PageSnapshot:
        """Extract raw text fields from a product page."""
        return PageSnapshot(
            asin=asin,
            url=url,
            title_text=self._first_text(
                soup, [self.selectors.get("title", "span#productTitle")]
            ),
            current_price_text=self._first_text(
                soup, self.selectors.get("current_price", [])
            ),
            original_price_text=self._first_text(
                soup, self.selectors.get("original_price", [])
            ),
            image_url=self._image_url(soup),
        )

    def fetch_batch(self, asins: list[str]) -> list[PageSnapshot]:
        """Fetch one product page per ASIN."""
        snapshots: list[PageSnapshot] = []
        for asin in asins:
            url = canonical_product_url(asin, self.domain) or ""
            soup = self._get_page(url)
            if soup is None:
                snapshots.append(PageSnapshot(asin=asin, url=url))
                continue
            snapshots.append(self.parse_page(soup, asin, url))
        return snapshots
