"""URL normalization and post identity helpers.

`normalize_url` strips tracking parameters so the same post shared from
different places maps to one URL, and `derive_post_id` turns that URL
into the stable id the content store deduplicates on.
"""

from __future__ import annotations

import base64
import logging
import re
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

# Tracking params to strip during URL normalization (utm_* is matched by prefix)
TRACKING_PARAMS = {
    "source",
    "fbclid",
    "gclid",
    "ref",
    "referrer",
    "campaign",
    "medium",
    "content",
    "term",
    "_ga",
    "_gl",
    "mc_cid",
    "mc_eid",
    "msclkid",
    "yclid",
}

POST_ID_LENGTH = 32

_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]")


def _is_tracking_param(name: str) -> bool:
    return name.startswith("utm_") or name in TRACKING_PARAMS


def normalize_url(url: str) -> str:
    """Strip tracking parameters from a URL.

    - Removes utm_* and the other known tracking params
    - Drops the whole query string for medium.com hosts
    - Returns the input unchanged if it can't be parsed as an absolute URL
    """
    if not url or not isinstance(url, str):
        return url

    try:
        parsed = urlsplit(url.strip())
        hostname = parsed.hostname or ""
    except ValueError as exc:
        logger.warning("Failed to clean URL %s: %s", url, exc)
        return url

    if not parsed.scheme or not hostname:
        logger.warning("Failed to clean URL %s: not an absolute URL", url)
        return url

    if "medium.com" in hostname:
        query = ""
    else:
        kept = [
            (k, v)
            for k, v in parse_qsl(parsed.query, keep_blank_values=True)
            if not _is_tracking_param(k)
        ]
        query = urlencode(kept)

    path = parsed.path or "/"
    return urlunsplit((parsed.scheme, parsed.netloc, path, query, parsed.fragment))


def derive_post_id(url: str) -> str:
    """Deterministic id for a normalized URL.

    Base64 of the URL bytes with non-alphanumerics removed, keeping the
    last 32 characters. Every post on a profile shares the same URL
    prefix, so the tail is where URLs actually differ.
    """
    encoded = base64.b64encode(url.encode("utf-8")).decode("ascii")
    return _NON_ALNUM.sub("", encoded)[-POST_ID_LENGTH:]
