"""Flask route protection backed by a `TokenVerifier`.

Per request, a protected view:
1. extracts the raw token (header or cookie),
2. verifies it,
3. exposes the verified claims as `flask.g.jwt`,
4. or aborts with the failing error's `http_status`.
"""

from __future__ import annotations

from functools import wraps
from typing import TYPE_CHECKING, Any, Final

from flask import Flask, abort, g

from .errors import Auth0Error
from .extractors import BearerExtractor
from .logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from .protocols import Extractor, TokenVerifier, ViewFunc

_EXT_KEY: Final[str] = "auth0_client"
"""Flask extensions registry key for AuthExtension."""

logger = get_logger(__name__)


class AuthExtension:
    """
    Decorator glue between Flask views and a token verifier.

    Usage:
        auth = AuthExtension(JWKSVerifier(authority, policy))

        @app.get("/me")
        @auth.require()
        def me():
            return {"sub": g.jwt["sub"]}
    """

    def __init__(
        self,
        verifier: TokenVerifier | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        self._verifier = verifier
        self._extractor: Extractor = extractor or BearerExtractor()

    def init_app(
        self,
        app: Flask,
        *,
        verifier: TokenVerifier | None = None,
        extractor: Extractor | None = None,
    ) -> None:
        """Register on `app`, optionally replacing the verifier or extractor."""
        if verifier is not None:
            self._verifier = verifier
        if extractor is not None:
            self._extractor = extractor

        app.extensions[_EXT_KEY] = self

    def require(self) -> Callable[[ViewFunc], ViewFunc]:
        """Return a decorator that rejects requests without a valid token.

        Errors map to responses through `Auth0Error.http_status`: token
        problems are 401, an unreachable JWKS endpoint is 503, and a provider
        returning garbage is 502.
        """

        def decorator(view: ViewFunc) -> ViewFunc:
            @wraps(view)
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                if self._verifier is None:
                    raise RuntimeError("AuthExtension has no verifier configured")

                try:
                    token = self._extractor.extract()
                    g.jwt = self._verifier.verify(token)
                except Auth0Error as e:
                    logger.info(
                        "request_rejected",
                        error=type(e).__name__,
                        status=e.http_status,
                    )
                    abort(e.http_status, description=e.description)

                return view(*args, **kwargs)

            return wrapper

        return decorator
