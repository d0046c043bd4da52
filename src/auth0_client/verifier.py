"""JWT verification against keys published at a JWKS endpoint.

This module provides:
- `ValidationPolicy`: which checks `jwt.decode` applies
- `valid_jwt`: the stateless verification entry point
- `JWKSVerifier`: a caller that keeps the returned key set between calls

Verification walks a fixed sequence of stages, each with its own error:

    header parsed   -> MalformedToken
    kid present     -> MissingKeyId (before any network or crypto work)
    key resolved    -> MissingKeyId / TransportError / MalformedResponse
    key built       -> InvalidKeyMaterial
    token validated -> TokenInvalid / ExpiredToken

Only the key set refresh inside resolution is ever retried.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Final

import jwt

from .errors import ExpiredToken, MalformedToken, MissingKeyId, TokenInvalid
from .key_material import build_verification_key
from .logging import get_logger
from .resolver import resolve_key

if TYPE_CHECKING:
    import httpx

    from .keys import KeySet
    from .protocols import Claims

logger = get_logger(__name__)

RSA_ALGORITHMS: Final[frozenset[str]] = frozenset(
    {"RS256", "RS384", "RS512", "PS256", "PS384", "PS512"}
)
"""Signing algorithms an RSA public key can verify."""


@dataclass(frozen=True, slots=True)
class ValidationPolicy:
    """Checks applied to a token once its signing key is known.

    Attributes:
        algorithms: Allow-list of signing algorithms. The header's `alg`
            must be one of these. Only RSA algorithms (`RSA_ALGORITHMS`)
            are accepted, since only RSA keys are built.
        verify_exp: Reject tokens whose `exp` has passed.
        verify_aud: Require `aud` to match `audience`.
        verify_iss: Require `iss` to match `issuer`.
        audience: Expected audience, required when `verify_aud` is on.
        issuer: Expected issuer, required when `verify_iss` is on.
        required_claims: Claim names that must be present in the payload.
        leeway: Clock skew tolerance in seconds for exp/nbf/iat.

    Example:
        ```python
        policy = ValidationPolicy(
            audience="https://api.example.com",
            verify_iss=True,
            issuer="https://tenant.auth0.com/",
            required_claims=frozenset({"sub"}),
        )
        ```
    """

    algorithms: tuple[str, ...] = ("RS256",)
    verify_exp: bool = True
    verify_aud: bool = True
    verify_iss: bool = False
    audience: str | tuple[str, ...] | None = None
    issuer: str | None = None
    required_claims: frozenset[str] = field(default_factory=frozenset)
    leeway: float = 0

    def __post_init__(self) -> None:
        if not self.algorithms:
            raise ValueError("algorithms allow-list cannot be empty")
        if any(alg.lower() == "none" for alg in self.algorithms):
            raise ValueError("'none' cannot be an allowed algorithm")
        unsupported = sorted(set(self.algorithms) - RSA_ALGORITHMS)
        if unsupported:
            raise ValueError(
                f"Only RSA signing algorithms are supported, got {', '.join(unsupported)}"
            )
        if self.verify_aud and not self.audience:
            raise ValueError("verify_aud requires an expected audience")
        if self.verify_iss and not self.issuer:
            raise ValueError("verify_iss requires an expected issuer")

    def decode_options(self) -> dict[str, Any]:
        """Return the `options` mapping passed to `jwt.decode`."""
        return {
            "verify_signature": True,
            "verify_exp": self.verify_exp,
            "verify_aud": self.verify_aud,
            "verify_iss": self.verify_iss,
            "require": sorted(self.required_claims),
        }


@dataclass(frozen=True, slots=True)
class TokenData:
    """Header and claims of a token that passed verification."""

    header: Mapping[str, Any]
    claims: Claims

    @property
    def kid(self) -> str:
        return self.header["kid"]


def _read_kid(token: str) -> str:
    try:
        header = jwt.get_unverified_header(token)
    except jwt.InvalidTokenError as e:
        raise MalformedToken(f"Unable to parse token header: {e}") from e

    kid = header.get("kid")
    if not kid or not isinstance(kid, str):
        raise MissingKeyId("Token header has no 'kid'")
    return kid


def valid_jwt(
    token: str,
    authority: str,
    policy: ValidationPolicy,
    jwks: KeySet | None = None,
    *,
    http_client: httpx.Client | None = None,
) -> tuple[TokenData, KeySet]:
    """Verify `token` and return its data with the key set that verified it.

    Args:
        token: Compact-serialized JWT.
        authority: Base URL whose `/.well-known/jwks.json` publishes the keys.
        policy: Checks to apply after signature verification.
        jwks: Key set from a previous call. Fetched from the authority when
            omitted.
        http_client: Optional client for JWKS requests.

    Returns:
        `(TokenData, KeySet)`. Keep the set and pass it to the next call; it
        is a freshly fetched one whenever a refresh happened.

    Raises:
        MalformedToken: The header cannot be parsed.
        MissingKeyId: No `kid`, or no published key matches it.
        InvalidKeyMaterial: The matched key is not a usable RSA key.
        ExpiredToken: `exp` has passed and `policy.verify_exp` is on.
        TokenInvalid: Any other signature or claims failure.
        TransportError, MalformedResponse: A JWKS fetch failed.

    Example:
        ```python
        data, jwks = valid_jwt(token, "https://tenant.auth0.com", policy)
        # next request reuses the set
        data, jwks = valid_jwt(other_token, "https://tenant.auth0.com", policy, jwks)
        ```
    """
    kid = _read_kid(token)
    record, jwks = resolve_key(kid, jwks, authority, http_client=http_client)
    key = build_verification_key(record)

    try:
        decoded = jwt.decode_complete(
            token,
            key,
            algorithms=list(policy.algorithms),
            options=policy.decode_options(),
            audience=policy.audience if policy.verify_aud else None,
            issuer=policy.issuer if policy.verify_iss else None,
            leeway=policy.leeway,
        )
    except jwt.ExpiredSignatureError as e:
        logger.info("jwt_rejected", kid=kid, stage="claims", reason=str(e))
        raise ExpiredToken("Token has expired", reason=e) from e
    except jwt.InvalidTokenError as e:
        logger.info("jwt_rejected", kid=kid, stage="signature_or_claims", reason=str(e))
        raise TokenInvalid(f"Token validation failed: {e}", reason=e) from e
    except (TypeError, jwt.InvalidKeyError) as e:
        # header alg that cannot use an RSA public key
        logger.info("jwt_rejected", kid=kid, stage="signature", reason=str(e))
        raise TokenInvalid(f"Token cannot be verified with key {kid!r}: {e}", reason=e) from e

    logger.debug("jwt_verified", kid=kid, alg=decoded["header"].get("alg"))
    return TokenData(header=decoded["header"], claims=decoded["payload"]), jwks


class JWKSVerifier:
    """Token verifier that carries the key set from one call to the next.

    `valid_jwt` itself is stateless; this class is the caller that stores the
    returned `KeySet` and hands it back on the next call, so steady-state
    verification does no network I/O at all. The swap is guarded by a lock,
    making one instance safe to share across request threads.

    Example:
        ```python
        verifier = JWKSVerifier(
            "https://tenant.auth0.com",
            ValidationPolicy(audience="https://api.example.com"),
        )
        claims = verifier.verify(raw_token)
        ```
    """

    def __init__(
        self,
        authority: str,
        policy: ValidationPolicy,
        *,
        jwks: KeySet | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._authority = authority
        self._policy = policy
        self._http = http_client
        self._jwks = jwks
        self._lock = threading.Lock()

    @property
    def jwks(self) -> KeySet | None:
        with self._lock:
            return self._jwks

    def verify_token(self, token: str) -> TokenData:
        """Verify `token`, keeping any refreshed key set for later calls."""
        known = self.jwks
        data, jwks = valid_jwt(
            token, self._authority, self._policy, known, http_client=self._http
        )
        if jwks is not known:
            with self._lock:
                self._jwks = jwks
        return data

    def verify(self, token: str) -> Claims:
        return self.verify_token(token).claims
