"""Key set retrieval from a JWKS endpoint.

`fetch_jwks` performs exactly one HTTP GET per call. There is no retry,
backoff or caching here; deciding when to fetch again belongs to the
resolver and, across calls, to whoever holds the returned `KeySet`.
"""

from __future__ import annotations

from typing import Final

import httpx

from .errors import MalformedResponse, TransportError
from .keys import KeySet
from .logging import get_logger
from .urls import normalize_url

DEFAULT_TIMEOUT: Final[float] = 10.0
"""Seconds allowed for a JWKS request when the client is created here."""

logger = get_logger(__name__)


def fetch_jwks(url: str, *, http_client: httpx.Client | None = None) -> KeySet:
    """Fetch and deserialize the key set published at `url`.

    Args:
        url: Absolute JWKS URL. Duplicate slashes are collapsed first.
        http_client: Client to send the request with. A short-lived client
            is created (and closed) when omitted.

    Raises:
        TransportError: The request failed or returned a non-2xx status.
        MalformedResponse: The body is not a well-formed JWKS document.
    """
    url = normalize_url(url)
    logger.debug("jwks_fetch_started", url=url)

    try:
        if http_client is None:
            with httpx.Client(timeout=DEFAULT_TIMEOUT) as client:
                response = client.get(url)
        else:
            response = http_client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("jwks_fetch_failed", url=url, error=str(e))
        raise TransportError(f"Unable to fetch JWKS from {url}: {e}") from e

    try:
        document = response.json()
    except ValueError as e:
        raise MalformedResponse(f"JWKS response from {url} is not JSON") from e

    jwks = KeySet.from_dict(document)
    logger.info("jwks_fetched", url=url, keys_count=len(jwks))
    return jwks
