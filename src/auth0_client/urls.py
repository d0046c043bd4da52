"""URL helpers for provider endpoints."""

from __future__ import annotations

import re
from typing import Final

JWKS_PATH: Final[str] = "/.well-known/jwks.json"
"""Well-known path of the key set under an authority."""

TOKEN_PATH: Final[str] = "/oauth/token"
"""Token endpoint path under a tenant domain."""

_DUPLICATE_SLASHES: Final[re.Pattern[str]] = re.compile(r"([^:/]/)/+")


def normalize_url(url: str) -> str:
    """Collapse repeated slashes in the path, leaving `scheme://` intact.

    `f"{authority}/.well-known/jwks.json"` with an authority ending in "/"
    yields "...//.well-known/...", which some providers reject.

    >>> normalize_url("https://tenant.auth0.com//.well-known/jwks.json")
    'https://tenant.auth0.com/.well-known/jwks.json'
    """
    return _DUPLICATE_SLASHES.sub(r"\1", url)


def with_scheme(domain: str) -> str:
    """Prefix a bare tenant domain with https://."""
    if "://" in domain:
        return domain
    return f"https://{domain}"


def jwks_url(authority: str) -> str:
    """Return the JWKS endpoint for `authority`.

    Both the initial fetch and the refresh-on-miss go through here, so they
    always target the same document. An authority that already points at
    the well-known document is used as is.
    """
    url = normalize_url(with_scheme(authority)).rstrip("/")
    if url.endswith(JWKS_PATH):
        return url
    return f"{url}{JWKS_PATH}"


def token_url(domain: str) -> str:
    """Return the OAuth token endpoint for a tenant domain."""
    return normalize_url(f"{with_scheme(domain)}{TOKEN_PATH}")
