# deal_checker/config/settings.py

"""Central configuration for the deal_checker pipeline."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

from deal_checker.errors import ConfigurationError

load_dotenv()


def _env(name: str, default: str = "") -> str:
    """Read an environment variable, treating blank values as unset."""
    value = os.getenv(name, "").strip()
    return value or default


class Settings:
    """Central configuration for the deal_checker pipeline."""

    # --- Transport ---
    REQUEST_TIMEOUT: int = 30           # Seconds before a provider call times out
    GET_RETRIES: int = 1                # Extra attempts for keyed GET calls only
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    PROXY_URL: str = _env("HTTPS_PROXY") or _env("HTTP_PROXY")
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "Upgrade-Insecure-Requests": "1",
    }
    CAPTCHA_KEYWORDS: list[str] = [
        "enter the characters you see below",
        "sorry, we just need to make sure you're not a robot",
        "api-services-support@amazon.com",
    ]

    # --- Affiliate ---
    AFFILIATE_TAG: str = _env("AMAZON_ASSOCIATE_TAG")
    AFFILIATE_DOMAIN: str = _env(
        "AMAZON_ASSOCIATE_DOMAIN", "www.amazon.com"
    )

    # --- Product Advertising API (signed) ---
    PAAPI_ACCESS_KEY: str = _env("PAAPI_ACCESS_KEY")
    PAAPI_SECRET_KEY: str = _env("PAAPI_SECRET_KEY")
    PAAPI_PARTNER_TAG: str = _env("PAAPI_PARTNER_TAG")
    PAAPI_REGION: str = _env("PAAPI_REGION", "us-east-1")
    PAAPI_HOST: str = _env("PAAPI_HOST", "webservices.amazon.com")
    PAAPI_SERVICE: str = "ProductAdvertisingAPI"
    PAAPI_TARGET: str = (
        "com.amazon.paapi5.v1.ProductAdvertisingAPIv1.GetItems"
    )
    PAAPI_PATH: str = "/paapi5/getitems"

    # --- Keepa (API key) ---
    KEEPA_KEY: str = _env("KEEPA_KEY")
    KEEPA_URL: str = "https://api.keepa.com/product"
    KEEPA_DOMAIN: int = 1               # 1 = amazon.com

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    SELECTORS_PATH: Path = BASE_DIR / "deal_checker" / "config" / "selectors.json"
    INPUT_DIR: Path = BASE_DIR / "DoNotDelete-MyListInput"
    OUTPUT_ROOT: Path = BASE_DIR / "output"
    LOGS_DIR: Path = BASE_DIR / "logs"
    DEALS_FILENAME: str = "deals.json"

    # Empty list = process every .txt file in INPUT_DIR
    SELECTED_TXT_FILES: list[str] = []
    SAVE_IMAGES: bool = False

    # --- Providers (registry, selected by id) ---
    DEFAULT_PROVIDER: str = "paapi"
    AVAILABLE_PROVIDERS: list[dict[str, str]] = [
        {
            "id": "paapi",
            "label": "Amazon PA-API",
            "provider": "deal_checker.providers.paapi_provider.PaapiProvider",
            "batch_size": "10",
            "interval": "1.25",
        },
        {
            "id": "keepa",
            "label": "Keepa",
            "provider": "deal_checker.providers.keepa_provider.KeepaProvider",
            "batch_size": "20",
            "interval": "60",
        },
        {
            "id": "page",
            "label": "Product page",
            "provider": "deal_checker.providers.page_provider.PageProvider",
            "batch_size": "1",
            "interval": "3",
        },
    ]

    _REQUIRED_CREDENTIALS: dict[str, list[str]] = {
        "paapi": [
            "PAAPI_ACCESS_KEY",
            "PAAPI_SECRET_KEY",
            "PAAPI_PARTNER_TAG",
        ],
    }

    @classmethod
    def get_provider(cls, provider_id: str) -> dict[str, str]:
        """Return the registry entry for *provider_id*."""
        for entry in cls.AVAILABLE_PROVIDERS:
            if entry["id"] == provider_id:
                return entry
        valid = ", ".join(p["id"] for p in cls.AVAILABLE_PROVIDERS)
        raise ConfigurationError(
            f"Unknown provider '{provider_id}' (available: {valid})"
        )

    @classmethod
    def require_credentials(cls, provider_id: str) -> None:
        """Raise ConfigurationError if the provider's credentials are unset."""
        missing = [
            name
            for name in cls._REQUIRED_CREDENTIALS.get(provider_id, [])
            if not getattr(cls, name)
        ]
        if missing:
            raise ConfigurationError(
                f"Credentials missing for '{provider_id}': "
                f"set {', '.join(missing)}"
            )
