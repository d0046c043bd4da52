"""Structural interfaces shared by the verifier and the Flask integration.

Protocols (PEP 544) let tests and applications plug in their own verifier or
token extractor without inheriting from anything in this package.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any, Protocol

type Claims = Mapping[str, Any]
"""Decoded, verified JWT payload."""

type ViewFunc = Callable[..., Any]
"""Flask view function."""


class TokenVerifier(Protocol):
    """Anything that turns a raw JWT into verified claims.

    `JWKSVerifier` is the implementation shipped with this package.
    """

    def verify(self, token: str) -> Claims:
        """Verify `token` and return its claims.

        Raises:
            Auth0Error: Any subclass describing why the token was rejected.
        """
        ...


class Extractor(Protocol):
    """Pulls the raw JWT out of the current Flask request."""

    def extract(self) -> str:
        """Return the raw token.

        Raises:
            MissingToken: No token in the expected place.
        """
        ...
