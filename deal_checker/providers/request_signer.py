# deal_checker/providers/request_signer.py

"""AWS Signature Version 4 signing for Product Advertising API calls.

The signature is only accepted when it is bit-exact with what the API
recomputes, so the header block, its ordering and the body bytes that
are hashed must match what is sent on the wire.
"""

import hashlib
import hmac
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

ALGORITHM = "AWS4-HMAC-SHA256"
CONTENT_ENCODING = "amz-1.0"
CONTENT_TYPE = "application/json; charset=utf-8"


@dataclass(frozen=True)
class SigningCredentials:
    """Everything needed to sign one call except the payload."""

    access_key: str
    secret_key: str
    region: str
    service: str
    host: str


@dataclass(frozen=True)
class SignedRequest:
    """A fully signed request ready for the HTTP client."""

    method: str
    url: str
    headers: dict[str, str]
    body: str


def _sha256_hex(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def _hmac(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(
    secret_key: str,
    date_stamp: str,
    region: str,
    service: str,
) -> bytes:
    """Chain HMAC-SHA256 over date, region, service and ``aws4_request``."""
    k_date = _hmac(f"AWS4{secret_key}".encode("utf-8"), date_stamp)
    k_region = _hmac(k_date, region)
    k_service = _hmac(k_region, service)
    return _hmac(k_service, "aws4_request")


def serialize_payload(payload: dict[str, Any]) -> str:
    """Serialise the JSON body exactly once; this string is what gets hashed."""
    return json.dumps(payload, separators=(",", ":"))


def sign_request(
    credentials: SigningCredentials,
    target: str,
    path: str,
    payload: dict[str, Any],
    now: datetime | None = None,
) -> SignedRequest:
    """Sign a POST of *payload* to *path* for the given *target* operation.

    Args:
        credentials: Keys plus region/service/host scope.
        target: Value of the ``x-amz-target`` header.
        path: Request path, e.g. ``/paapi5/getitems``.
        payload: JSON body.
        now: Signing time; defaults to the current UTC time.

    Returns:
        A SignedRequest whose ``body`` is the exact string that was hashed.
    """
    method = "POST"
    t = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    amz_date = t.strftime("%Y%m%dT%H%M%SZ")
    date_stamp = t.strftime("%Y%m%d")
    body = serialize_payload(payload)

    header_values = {
        "content-encoding": CONTENT_ENCODING,
        "content-type": CONTENT_TYPE,
        "host": credentials.host,
        "x-amz-date": amz_date,
        "x-amz-target": target,
    }
    names = sorted(header_values)
    canonical_headers = "".join(
        f"{name}:{header_values[name].strip()}\n" for name in names
    )
    signed_headers = ";".join(names)

    canonical_request = "\n".join(
        [
            method,
            path,
            "",
            canonical_headers,
            signed_headers,
            _sha256_hex(body),
        ]
    )

    credential_scope = (
        f"{date_stamp}/{credentials.region}/"
        f"{credentials.service}/aws4_request"
    )
    string_to_sign = "\n".join(
        [
            ALGORITHM,
            amz_date,
            credential_scope,
            _sha256_hex(canonical_request),
        ]
    )

    signing_key = derive_signing_key(
        credentials.secret_key,
        date_stamp,
        credentials.region,
        credentials.service,
    )
    signature = hmac.new(
        signing_key,
        string_to_sign.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()

    authorization = (
        f"{ALGORITHM} "
        f"Credential={credentials.access_key}/{credential_scope}, "
        f"SignedHeaders={signed_headers}, "
        f"Signature={signature}"
    )

    return SignedRequest(
        method=method,
        url=f"https://{credentials.host}{path}",
        headers={**header_values, "Authorization": authorization},
        body=body,
    )
