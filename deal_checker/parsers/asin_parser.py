# deal_checker/parsers/asin_parser.py

"""ASIN extraction from heterogeneous Amazon listing URLs."""

import re
from urllib.parse import parse_qsl, urlsplit

# /dp/, /gp/product/, /gp/aw/d/ and /gp/offer-listing/ forms
_PRODUCT_PATH_RE = re.compile(
    r"/(?:dp|gp/product|gp/aw/d|gp/offer-listing)/([A-Z0-9]{10})",
    re.IGNORECASE,
)

# Any bare 10-character path segment
_BARE_SEGMENT_RE = re.compile(
    r"/([A-Z0-9]{10})(?:[/?#]|$)",
    re.IGNORECASE,
)

_ASIN_VALUE_RE = re.compile(r"^[A-Z0-9]{10}$", re.IGNORECASE)

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_BARE_AMAZON_RE = re.compile(r"^amazon\.", re.IGNORECASE)


def normalize_listing_url(raw: str) -> str:
    """Give a pasted listing reference an explicit https scheme.

    ``amazon.com/dp/X`` becomes ``https://www.amazon.com/dp/X``;
    short links and ``www.`` hosts only gain the scheme.
    """
    url = raw.strip()
    if not url or _SCHEME_RE.match(url):
        return url
    if _BARE_AMAZON_RE.match(url):
        return f"https://www.{url}"
    return f"https://{url}"


def extract_asin(url: str) -> str | None:
    """Return the uppercased ASIN found in *url*, or None.

    Rules are tried in order: product path forms, a bare 10-character
    path segment, then an ``asin`` query parameter.  When the URL cannot
    be parsed at all the product path pattern is searched in the raw text.
    """
    if not isinstance(url, str) or not url:
        return None

    try:
        parts = urlsplit(url.strip())
        query = parse_qsl(parts.query, keep_blank_values=True)
    except ValueError:
        match = _PRODUCT_PATH_RE.search(url)
        return match.group(1).upper() if match else None

    match = _PRODUCT_PATH_RE.search(parts.path)
    if match:
        return match.group(1).upper()

    match = _BARE_SEGMENT_RE.search(parts.path)
    if match:
        return match.group(1).upper()

    for name, value in query:
        if name.lower() == "asin" and _ASIN_VALUE_RE.match(value):
            return value.upper()

    return None


def canonical_product_url(asin: str | None, domain: str) -> str | None:
    """Build ``https://<domain>/dp/<ASIN>`` or None without an ASIN."""
    if not asin:
        return None
    return f"https://{domain}/dp/{asin}"
