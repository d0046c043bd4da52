"""Signing key resolution with a single refresh on miss.

Providers rotate signing keys, so a cached key set can lag behind the
tokens being presented. Resolution therefore makes at most two lookups:

1. Look the `kid` up in the set the caller already has.
2. On a miss, fetch the set again from the authority and look once more.

A `kid` still missing after the refresh is a terminal `MissingKeyId`; there
is no further polling, which bounds a verification call to two JWKS
round trips and keeps a misconfigured `kid` from being masked by retries.
"""

from __future__ import annotations

from typing import Final

import httpx

from .errors import MissingKeyId
from .fetcher import fetch_jwks
from .keys import KeyRecord, KeySet
from .logging import get_logger
from .urls import jwks_url

_LOOKUP_ATTEMPTS: Final[int] = 2
"""Cached lookup plus one refetch-and-retry."""

logger = get_logger(__name__)


def fetch_jwks_if_needed(
    jwks: KeySet | None,
    authority: str,
    *,
    http_client: httpx.Client | None = None,
) -> KeySet:
    """Return `jwks` unchanged, or fetch the authority's set if there is none."""
    if jwks is not None:
        return jwks
    return fetch_jwks(jwks_url(authority), http_client=http_client)


def resolve_key(
    kid: str,
    jwks: KeySet | None,
    authority: str,
    *,
    http_client: httpx.Client | None = None,
) -> tuple[KeyRecord, KeySet]:
    """Find the key for `kid`, refreshing the key set once on a miss.

    Args:
        kid: Key identifier from the token header.
        jwks: Key set known to the caller. When None, the authority's set is
            fetched first and that becomes the starting point.
        authority: Base URL the key set is published under.
        http_client: Optional client used for any JWKS request.

    Returns:
        The matching record and the set it was found in. The set is the
        caller's own object when no refresh was needed.

    Raises:
        MissingKeyId: `kid` is absent even from the refreshed set.
        TransportError, MalformedResponse: A fetch failed.
    """
    jwks = fetch_jwks_if_needed(jwks, authority, http_client=http_client)

    for attempt in range(_LOOKUP_ATTEMPTS):
        if attempt:
            logger.info("jwk_cache_miss", kid=kid, known_kids=list(jwks.kids))
            jwks = fetch_jwks(jwks_url(authority), http_client=http_client)

        record = jwks.find(kid)
        if record is not None:
            logger.debug("jwk_resolved", kid=kid, refreshed=bool(attempt))
            return record, jwks

    raise MissingKeyId(f"No signing key with kid {kid!r} at {authority}", kid=kid)
