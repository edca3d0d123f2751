# deal_checker/providers/base_provider.py

"""Abstract base class for all catalog providers."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from curl_cffi import requests as curl_requests

from deal_checker.config.settings import Settings
from deal_checker.errors import ProviderError
from deal_checker.models.raw_item import RawItem


class BaseProvider(ABC):
    """Transport + parse for one catalog source.

    Subclasses turn a batch of ASINs into provider-specific raw records.
    They never build DealRecords and they raise ProviderError for
    transport or parse failures; an ASIN the provider does not know is
    simply missing from the returned list.
    """

    def __init__(self, provider_name: str) -> None:
        self.provider_name = provider_name
        self.logger = logging.getLogger(
            f"deal_checker.{provider_name}"
        )
        self.settings = Settings()
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER,
            proxies=self._proxies(),
        )
        self._request_timeout: int = self.settings.REQUEST_TIMEOUT

    def _proxies(self) -> dict[str, str] | None:
        """Route both schemes through the configured proxy, if any."""
        proxy = self.settings.PROXY_URL
        if not proxy:
            return None
        return {"http": proxy, "https": proxy}

    def _fetch_get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        retries: int = 0,
    ) -> curl_requests.Response:
        """GET with a bounded timeout, retrying transport errors *retries* times.

        Non-200 statuses are never retried.
        """
        for attempt in range(retries + 1):
            try:
                resp = self.session.get(
                    url,
                    params=params,
                    headers=headers,
                    timeout=self._request_timeout,
                )
            except curl_requests.RequestsError as exc:
                self.logger.warning(
                    "[%s] Request error on attempt %d: %s",
                    self.provider_name,
                    attempt + 1,
                    exc,
                )
                if attempt >= retries:
                    raise ProviderError(
                        f"{self.provider_name} request failed: {exc}"
                    ) from exc
                continue
            self._raise_for_status(resp)
            return resp
        raise ProviderError(f"{self.provider_name} request failed")

    def _fetch_post(
        self,
        url: str,
        headers: dict[str, str],
        body: str,
    ) -> curl_requests.Response:
        """POST a pre-serialised body once; no retries."""
        try:
            resp = self.session.post(
                url,
                headers=headers,
                data=body.encode("utf-8"),
                timeout=self._request_timeout,
            )
        except curl_requests.RequestsError as exc:
            raise ProviderError(
                f"{self.provider_name} request failed: {exc}"
            ) from exc
        self._raise_for_status(resp)
        return resp

    def _raise_for_status(self, resp: curl_requests.Response) -> None:
        """Turn any non-200 status into a ProviderError carrying the body."""
        if resp.status_code == 200:
            return
        body = ""
        try:
            body = resp.text
        except Exception:
            self.logger.debug(
                "[%s] Response body unavailable",
                self.provider_name,
            )
        detail = body or str(getattr(resp, "reason", "") or "")
        self.logger.error(
            "[%s] HTTP %d: %s",
            self.provider_name,
            resp.status_code,
            detail[:200],
        )
        raise ProviderError(
            f"{self.provider_name} error {resp.status_code}: {detail}",
            status_code=resp.status_code,
            body=detail,
        )

    def _parse_json(self, resp: curl_requests.Response) -> dict[str, Any]:
        """Decode a JSON object body or raise ProviderError."""
        try:
            data: Any = resp.json()
        except ValueError as exc:
            raise ProviderError(
                f"{self.provider_name} returned invalid JSON: {exc}"
            ) from exc
        if not isinstance(data, dict):
            raise ProviderError(
                f"{self.provider_name} returned unexpected JSON type "
                f"{type(data).__name__}"
            )
        return data

    def _log_missing(
        self, requested: list[str], returned: list[str | None],
    ) -> None:
        """Log requested ASINs the provider did not return."""
        got = {a for a in returned if a}
        missing = [a for a in requested if a not in got]
        if missing:
            self.logger.warning(
                "[%s] %d of %d ASINs not returned: %s",
                self.provider_name,
                len(missing),
                len(requested),
                ", ".join(missing),
            )

    def fetch_image(self, url: str) -> bytes | None:
        """Download an image; failures are logged and return None."""
        try:
            resp = self.session.get(url, timeout=self._request_timeout)
        except curl_requests.RequestsError as exc:
            self.logger.warning(
                "[%s] Image download failed for %s: %s",
                self.provider_name,
                url,
                exc,
            )
            return None
        if resp.status_code != 200:
            self.logger.warning(
                "[%s] Image download HTTP %d for %s",
                self.provider_name,
                resp.status_code,
                url,
            )
            return None
        return bytes(resp.content)

    @abstractmethod
    def fetch_batch(self, asins: list[str]) -> list[RawItem]:
        """Return the raw provider records for one batch of ASINs."""
        ...
