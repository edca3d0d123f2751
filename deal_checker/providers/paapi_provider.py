# deal_checker/providers/paapi_provider.py

"""Product Advertising API 5.0 GetItems client (SigV4-signed)."""

from typing import Any

from deal_checker.errors import ConfigurationError
from deal_checker.models.raw_item import PaapiItem
from deal_checker.providers.base_provider import BaseProvider
from deal_checker.providers.request_signer import (
    SigningCredentials,
    sign_request,
)


class PaapiProvider(BaseProvider):
    """GetItems client returning raw ``ItemsResult.Items`` entries.

    Requires PAAPI_ACCESS_KEY, PAAPI_SECRET_KEY and PAAPI_PARTNER_TAG.
    """

    MAX_BATCH = 10
    RESOURCES = [
        "ItemInfo.Title",
        "Offers.Listings.Price",
        "Offers.Listings.SavingBasis",
        "Images.Primary.Large",
        "DetailPageURL",
    ]

    def __init__(self) -> None:
        super().__init__("paapi")
        self.settings.require_credentials("paapi")
        self.credentials = SigningCredentials(
            access_key=self.settings.PAAPI_ACCESS_KEY,
            secret_key=self.settings.PAAPI_SECRET_KEY,
            region=self.settings.PAAPI_REGION,
            service=self.settings.PAAPI_SERVICE,
            host=self.settings.PAAPI_HOST,
        )
        self.partner_tag = self.settings.PAAPI_PARTNER_TAG
        self.marketplace = self.settings.AFFILIATE_DOMAIN

    def build_payload(self, asins: list[str]) -> dict[str, Any]:
        """Build the GetItems request body for one batch."""
        return {
            "ItemIds": list(asins),
            "PartnerTag": self.partner_tag,
            "PartnerType": "Associates",
            "Marketplace": self.marketplace,
            "Resources": list(self.RESOURCES),
        }

    def fetch_batch(self, asins: list[str]) -> list[PaapiItem]:
        """Sign and POST one GetItems call."""
        if len(asins) > self.MAX_BATCH:
            raise ConfigurationError(
                f"GetItems accepts at most {self.MAX_BATCH} ASINs, "
                f"got {len(asins)}"
            )
        if not asins:
            return []

        signed = sign_request(
            self.credentials,
            target=self.settings.PAAPI_TARGET,
            path=self.settings.PAAPI_PATH,
            payload=self.build_payload(asins),
        )
        self.logger.debug(
            "[paapi] GetItems for %d ASINs: %s",
            len(asins),
            ",".join(asins),
        )
        resp = self._fetch_post(signed.url, signed.headers, signed.body)
        data = self._parse_json(resp)

        for error in data.get("Errors") or []:
            self.logger.warning(
                "[paapi] %s: %s",
                error.get("Code", "Error"),
                error.get("Message", ""),
            )

        raw_items = (data.get("ItemsResult") or {}).get("Items") or []
        items = [
            PaapiItem(asin=item.get("ASIN"), data=item)
            for item in raw_items
            if isinstance(item, dict)
        ]
        self._log_missing(asins, [i.asin for i in items])
        return items
