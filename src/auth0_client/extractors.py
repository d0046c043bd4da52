"""Token extraction from Flask requests.

- `BearerExtractor`: `Authorization: Bearer <token>` (APIs)
- `CookieExtractor`: a named cookie (browser sessions, needs CSRF protection)
"""

from __future__ import annotations

from flask import request

from .errors import MissingToken


class BearerExtractor:
    """Reads the token from an `Authorization: Bearer <token>` header."""

    def extract(self) -> str:
        header = request.headers.get("Authorization", "").strip()
        if not header:
            raise MissingToken("Missing Authorization header")

        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer":
            raise MissingToken("Authorization scheme is not Bearer")

        token = token.strip()
        if not token:
            raise MissingToken("Bearer token is empty")
        return token


class CookieExtractor:
    """Reads the token from a cookie.

    Args:
        cookie_name: Cookie holding the JWT. Defaults to "access_token".

    Raises:
        ValueError: If `cookie_name` is blank.
    """

    def __init__(self, cookie_name: str = "access_token") -> None:
        if not cookie_name.strip():
            raise ValueError("cookie_name cannot be empty")
        self._name = cookie_name

    def extract(self) -> str:
        token = request.cookies.get(self._name)
        if not token:
            raise MissingToken(f"Missing cookie '{self._name}'")
        return token
