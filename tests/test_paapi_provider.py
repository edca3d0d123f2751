# tests/test_paapi_provider.py

"""Tests for the PA-API GetItems provider using a mocked session."""

import json
import unittest
from typing import Any
from unittest.mock import MagicMock, patch

from curl_cffi import requests as curl_requests

from deal_checker.config.settings import Settings
from deal_checker.errors import ConfigurationError, ProviderError
from deal_checker.models.raw_item import PaapiItem
from deal_checker.providers.paapi_provider import PaapiProvider

SESSION = "deal_checker.providers.base_provider.curl_requests.Session"

GET_ITEMS_RESPONSE: dict[str, Any] = {
    "ItemsResult": {
        "Items": [
            {
                "ASIN": "B000111222",
                "DetailPageURL": "https://www.amazon.com/dp/B000111222?tag=t-20",
                "ItemInfo": {"Title": {"DisplayValue": "Desk Lamp"}},
                "Offers": {
                    "Listings": [
                        {
                            "Price": {"Amount": 24.99},
                            "SavingBasis": {"Amount": 39.99},
                        }
                    ]
                },
            }
        ]
    },
    "Errors": [
        {
            "Code": "InvalidParameterValue",
            "Message": "The ItemId B000999888 is not accessible.",
        }
    ],
}


def _response(status: int = 200, payload: Any = None, text: str = "") -> MagicMock:
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    resp.json.return_value = payload
    return resp


class TestPaapiProvider(unittest.TestCase):
    """PaapiProvider behaviour."""

    def setUp(self) -> None:
        creds = patch.multiple(
            Settings,
            PAAPI_ACCESS_KEY="AKIDEXAMPLE",
            PAAPI_SECRET_KEY="secret",
            PAAPI_PARTNER_TAG="example-20",
        )
        creds.start()
        self.addCleanup(creds.stop)

        session_patch = patch(SESSION)
        mock_session_cls = session_patch.start()
        self.addCleanup(session_patch.stop)
        self.session = MagicMock()
        mock_session_cls.return_value = self.session

    def test_missing_credentials(self) -> None:
        """Construction fails without the signing keys."""
        with patch.object(Settings, "PAAPI_SECRET_KEY", ""):
            with self.assertRaises(ConfigurationError):
                PaapiProvider()

    def test_payload_shape(self) -> None:
        """ItemIds, PartnerTag and PartnerType are set from settings."""
        payload = PaapiProvider().build_payload(["B000111222"])
        self.assertEqual(payload["ItemIds"], ["B000111222"])
        self.assertEqual(payload["PartnerTag"], "example-20")
        self.assertEqual(payload["PartnerType"], "Associates")
        self.assertIn("Offers.Listings.Price", payload["Resources"])

    def test_fetch_batch_returns_raw_items(self) -> None:
        """Items come back as PaapiItem, untouched."""
        self.session.post.return_value = _response(payload=GET_ITEMS_RESPONSE)
        items = PaapiProvider().fetch_batch(["B000111222", "B000999888"])
        self.assertEqual(len(items), 1)
        self.assertIsInstance(items[0], PaapiItem)
        self.assertEqual(items[0].asin, "B000111222")
        self.assertEqual(
            items[0].data, GET_ITEMS_RESPONSE["ItemsResult"]["Items"][0]
        )

    def test_posts_the_signed_body(self) -> None:
        """The bytes sent are the compact JSON that was signed."""
        self.session.post.return_value = _response(payload={})
        PaapiProvider().fetch_batch(["B000111222"])

        self.session.post.assert_called_once()
        args, kwargs = self.session.post.call_args
        self.assertEqual(
            args[0], "https://webservices.amazon.com/paapi5/getitems"
        )
        body = kwargs["data"].decode("utf-8")
        self.assertNotIn(", ", body)
        self.assertNotIn(": ", body)
        self.assertEqual(json.loads(body)["ItemIds"], ["B000111222"])
        headers = kwargs["headers"]
        self.assertTrue(headers["Authorization"].startswith("AWS4-HMAC-SHA256 "))
        self.assertEqual(
            headers["x-amz-target"],
            "com.amazon.paapi5.v1.ProductAdvertisingAPIv1.GetItems",
        )
        self.assertEqual(kwargs["timeout"], Settings.REQUEST_TIMEOUT)

    def test_http_error_raises_with_body(self) -> None:
        """A 429 raises ProviderError carrying status and body."""
        self.session.post.return_value = _response(
            status=429, text='{"Errors":[{"Code":"TooManyRequests"}]}'
        )
        with self.assertRaises(ProviderError) as ctx:
            PaapiProvider().fetch_batch(["B000111222"])
        self.assertEqual(ctx.exception.status_code, 429)
        self.assertIn("TooManyRequests", ctx.exception.body)

    def test_transport_error_is_not_retried(self) -> None:
        """The signed POST is sent once even on a network failure."""
        self.session.post.side_effect = curl_requests.RequestsError("reset")
        with self.assertRaises(ProviderError):
            PaapiProvider().fetch_batch(["B000111222"])
        self.assertEqual(self.session.post.call_count, 1)

    def test_invalid_json(self) -> None:
        """A non-JSON 200 body is a ProviderError."""
        resp = _response()
        resp.json.side_effect = ValueError("Expecting value")
        self.session.post.return_value = resp
        with self.assertRaises(ProviderError):
            PaapiProvider().fetch_batch(["B000111222"])

    def test_batch_limit(self) -> None:
        """More than 10 ASINs is refused before any call."""
        asins = [f"B00000000{i}" for i in range(10)] + ["B000000010"]
        with self.assertRaises(ConfigurationError):
            PaapiProvider().fetch_batch(asins)
        self.session.post.assert_not_called()

    def test_empty_batch(self) -> None:
        """No ASINs, no call."""
        self.assertEqual(PaapiProvider().fetch_batch([]), [])
        self.session.post.assert_not_called()


if __name__ == "__main__":
    unittest.main()
