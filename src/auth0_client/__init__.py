"""
Auth0 client: token acquisition and JWKS-backed JWT verification.

Verification flow
-----------------
1. `valid_jwt(token, authority, policy, jwks)` reads the unverified header
   to get `kid` (rejecting tokens without one before any I/O).
2. The key set is the caller's `jwks`, or is fetched from
   `{authority}/.well-known/jwks.json`.
3. On a `kid` miss the set is fetched again, exactly once.
4. The matched RSA key is built from its modulus and exponent.
5. `jwt.decode` checks the signature and the `ValidationPolicy` claims.
6. The token data is returned together with the key set used, which the
   caller keeps for the next call.

Security notes
--------------
- The unverified header only selects a key. Nothing in it is trusted.
- Only algorithms on the policy allow-list are accepted.
- Only RSA keys are supported. Other key families are rejected, not skipped.

Example usage
-------------

.. code-block:: python

    from auth0_client import Auth0Client, ValidationPolicy, valid_jwt

    client = Auth0Client.from_env()
    token = client.authenticate()

    policy = ValidationPolicy(audience=client.audience)
    data, jwks = valid_jwt(token, "https://tenant.auth0.com", policy)
    print(data.claims["sub"])
"""

# Token acquisition
from .client import AccessTokenResponse, Auth0Client, GrantType

# Configuration
from .config import Auth0Settings

# Errors
from .errors import (
    Auth0Error,
    ConfigurationError,
    ExpiredToken,
    InvalidKeyMaterial,
    MalformedResponse,
    MalformedToken,
    MissingKeyId,
    MissingToken,
    TokenInvalid,
    TransportError,
)

# Extractors
from .extractors import BearerExtractor, CookieExtractor

# Key sets
from .fetcher import fetch_jwks
from .key_material import build_verification_key
from .keys import KeyFamily, KeyRecord, KeySet, RSAParameters

# Flask extension
from .flask_extension import AuthExtension

# Logging
from .logging import configure_logging

# Protocols
from .protocols import Claims, Extractor, TokenVerifier, ViewFunc
from .resolver import fetch_jwks_if_needed, resolve_key

# Verifier
from .verifier import JWKSVerifier, TokenData, ValidationPolicy, valid_jwt

__all__ = [
    # Errors
    "Auth0Error",
    "ConfigurationError",
    "ExpiredToken",
    "InvalidKeyMaterial",
    "MalformedResponse",
    "MalformedToken",
    "MissingKeyId",
    "MissingToken",
    "TokenInvalid",
    "TransportError",
    # Protocols
    "Claims",
    "Extractor",
    "TokenVerifier",
    "ViewFunc",
    # Key sets
    "KeyFamily",
    "KeyRecord",
    "KeySet",
    "RSAParameters",
    "fetch_jwks",
    "fetch_jwks_if_needed",
    "resolve_key",
    "build_verification_key",
    # Verifier
    "JWKSVerifier",
    "TokenData",
    "ValidationPolicy",
    "valid_jwt",
    # Token acquisition
    "AccessTokenResponse",
    "Auth0Client",
    "GrantType",
    "Auth0Settings",
    # Extractors
    "BearerExtractor",
    "CookieExtractor",
    # Flask extension
    "AuthExtension",
    # Logging
    "configure_logging",
]
