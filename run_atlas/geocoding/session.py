"""HTTP session for the reverse geocoding fallback."""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..config import (
    HTTP_POOL_CONNECTIONS,
    HTTP_POOL_MAXSIZE,
    NETWORK_GEOCODER_USER_AGENT,
)

__all__ = ["create_default_session"]

# 429 is left to RequestLimiter so every worker pauses, not just the one retrying.
_RETRY_STATUSES = (500, 502, 503, 504)


def create_default_session(
    user_agent: str = NETWORK_GEOCODER_USER_AGENT,
    *,
    retries: int = 3,
    pool_maxsize: int = HTTP_POOL_MAXSIZE,
) -> requests.Session:
    """Return a pooled session identifying itself with ``user_agent``.

    Public Nominatim instances reject requests without a descriptive agent.
    Country names are requested in English so alias folding sees one spelling.
    """

    retry = Retry(
        total=retries,
        backoff_factor=1.0,
        status_forcelist=_RETRY_STATUSES,
        allowed_methods=frozenset({"GET"}),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(
        pool_connections=HTTP_POOL_CONNECTIONS,
        pool_maxsize=pool_maxsize,
        max_retries=retry,
    )
    session = requests.Session()
    for prefix in ("https://", "http://"):
        session.mount(prefix, adapter)
    session.headers.update(
        {
            "User-Agent": user_agent,
            "Accept": "application/json",
            "Accept-Language": "en",
        }
    )
    return session
