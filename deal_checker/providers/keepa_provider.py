# deal_checker/providers/keepa_provider.py

"""Keepa product API client (API key, price statistics in cents)."""

from deal_checker.errors import ConfigurationError
from deal_checker.models.raw_item import KeepaProduct
from deal_checker.providers.base_provider import BaseProvider


class KeepaProvider(BaseProvider):
    """Keyed GET client returning raw Keepa ``products`` entries.

    Without KEEPA_KEY every batch comes back empty instead of failing.
    """

    MAX_BATCH = 20

    def __init__(self) -> None:
        super().__init__("keepa")
        self.api_key = self.settings.KEEPA_KEY
        if not self.api_key:
            self.logger.warning(
                "[keepa] KEEPA_KEY not set, batches will return no items"
            )

    def fetch_batch(self, asins: list[str]) -> list[KeepaProduct]:
        """GET ``/product`` for one batch with ``stats=1``."""
        if len(asins) > self.MAX_BATCH:
            raise ConfigurationError(
                f"Keepa batches are limited to {self.MAX_BATCH} ASINs, "
                f"got {len(asins)}"
            )
        if not self.api_key or not asins:
            return []

        params = {
            "key": self.api_key,
            "domain": self.settings.KEEPA_DOMAIN,
            "asin": ",".join(asins),
            "stats": 1,
        }
        resp = self._fetch_get(
            self.settings.KEEPA_URL,
            params=params,
            retries=self.settings.GET_RETRIES,
        )
        data = self._parse_json(resp)

        products = [
            KeepaProduct(asin=p.get("asin"), data=p)
            for p in data.get("products") or []
            if isinstance(p, dict)
        ]
        self.logger.debug(
            "[keepa] %d products returned, %s tokens left",
            len(products),
            data.get("tokensLeft", "?"),
        )
        self._log_missing(asins, [p.asin for p in products])
        return products
