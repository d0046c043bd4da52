"""Verification key construction from published key records.

Only RSA keys are supported. Every other family is rejected explicitly;
adding one is a reviewed change to `build_verification_key`, not a plugin.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from jwt.algorithms import RSAAlgorithm
from jwt.exceptions import InvalidKeyError

from .errors import InvalidKeyMaterial
from .keys import KeyFamily

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey

    from .keys import KeyRecord


def build_verification_key(record: KeyRecord) -> RSAPublicKey:
    """Return the public key for `record`, ready for `jwt.decode`.

    Raises:
        InvalidKeyMaterial: The family is not RSA, or the modulus/exponent
            do not decode into a valid RSA public key.
    """
    if record.family is not KeyFamily.RSA or record.rsa is None:
        raise InvalidKeyMaterial(
            f"Unsupported key family {record.family.value!r} for kid {record.kid!r}",
            kid=record.kid,
        )

    # Public components only, even if the provider leaked private members.
    jwk = {"kty": "RSA", "n": record.rsa.n, "e": record.rsa.e}
    try:
        key = RSAAlgorithm.from_jwk(jwk)
    except (InvalidKeyError, ValueError, TypeError) as e:
        raise InvalidKeyMaterial(
            f"Malformed RSA parameters for kid {record.kid!r}", kid=record.kid
        ) from e

    return key  # type: ignore[return-value]
