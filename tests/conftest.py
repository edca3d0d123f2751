# tests/conftest.py

"""Shared pytest fixtures for all deal_checker tests."""

from collections.abc import Generator
from unittest.mock import patch

import pytest

from deal_checker.config.settings import Settings


@pytest.fixture(autouse=True)
def clean_settings() -> Generator[None, None, None]:
    """Blank out env-derived credentials so a local .env never leaks in."""
    with patch.multiple(
        Settings,
        AFFILIATE_TAG="",
        AFFILIATE_DOMAIN="www.amazon.com",
        PAAPI_ACCESS_KEY="",
        PAAPI_SECRET_KEY="",
        PAAPI_PARTNER_TAG="",
        PAAPI_REGION="us-east-1",
        PAAPI_HOST="webservices.amazon.com",
        KEEPA_KEY="",
        PROXY_URL="",
    ):
        yield
