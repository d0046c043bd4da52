"""Authentication and token verification errors.

Every failure path of the client and the verifier raises a subclass of
`Auth0Error`, so application code can catch one type to handle any failure
generically, or pick out a specific kind:

- `TransportError`: the identity provider could not be reached.
- `MalformedResponse`: the provider answered with something unusable.
- `MalformedToken`: the token header cannot be parsed.
- `MissingKeyId`: no `kid` in the header, or no published key matches it.
- `InvalidKeyMaterial`: the matched key cannot be used for verification.
- `TokenInvalid` / `ExpiredToken`: verification ran and rejected the token.

Security Note:
    Messages are meant for server-side logs. The Flask integration only
    returns the short `description` to clients.
"""

from __future__ import annotations

from typing import ClassVar


class Auth0Error(Exception):
    """Base exception for all authentication and verification failures.

    Attributes:
        http_status: Status used when the error terminates an HTTP request.
        description: Short client-safe text for that response.
    """

    http_status: ClassVar[int] = 401
    description: ClassVar[str] = "Authentication failed"


class ConfigurationError(Auth0Error):
    """Raised when required settings are missing from the environment."""

    http_status = 500
    description = "Server misconfigured"


class TransportError(Auth0Error):
    """Raised when a call to the token or JWKS endpoint did not complete.

    Covers connection failures, timeouts and non-2xx responses. The
    underlying `httpx.HTTPError` is chained as `__cause__`.
    """

    http_status = 503
    description = "Identity provider unavailable"


class MalformedResponse(Auth0Error):
    """Raised when a provider response body does not have the expected shape."""

    http_status = 502
    description = "Identity provider returned an invalid response"


class MissingToken(Auth0Error):  # noqa: N818
    """Raised when no token could be extracted from the request."""

    description = "Missing token"


class MalformedToken(Auth0Error):  # noqa: N818
    """Raised when the token header segment cannot be parsed."""

    description = "Malformed token"


class MissingKeyId(Auth0Error):  # noqa: N818
    """Raised when a token cannot be matched to a published key.

    Either the header carries no `kid`, or the `kid` is absent from the key
    set even after one refresh.

    Attributes:
        kid: The requested key identifier, or None if the header had none.
    """

    description = "Unknown signing key"

    def __init__(self, message: str, kid: str | None = None) -> None:
        super().__init__(message)
        self.kid = kid


class InvalidKeyMaterial(Auth0Error):
    """Raised when a matched key cannot be turned into a verification key.

    The key family is unsupported (anything but RSA), or the published RSA
    parameters are malformed. No other key is tried.
    """

    description = "Invalid signing key"

    def __init__(self, message: str, kid: str | None = None) -> None:
        super().__init__(message)
        self.kid = kid


class TokenInvalid(Auth0Error):  # noqa: N818
    """Raised when signature or claims validation fails.

    Attributes:
        reason: The PyJWT exception describing the failure (bad signature,
            wrong audience or issuer, disallowed algorithm, missing claim...).
    """

    description = "Invalid token"

    def __init__(self, message: str, reason: Exception) -> None:
        super().__init__(message)
        self.reason = reason


class ExpiredToken(TokenInvalid):  # noqa: N818
    """Raised when the `exp` claim has passed and expiry checks are enabled."""

    description = "Expired token"
