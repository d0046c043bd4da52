"""JSON Web Key Set data model.

A `KeySet` is a snapshot of the provider's JWKS document. It is immutable:
a refresh produces a brand new set that replaces the old one wholesale, it
is never merged or patched. Callers own key sets and thread them through
verification calls; nothing in this package holds one globally.

Only the fields needed for key selection and key construction are
interpreted. RSA public parameters (`n`, `e`) are kept exactly as published
(base64url text) and are decoded by `key_material`, not here.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import MalformedResponse


class KeyFamily(Enum):
    """Algorithm family of a published key, from its `kty` member."""

    RSA = "RSA"
    EC = "EC"
    OCT = "oct"
    OKP = "OKP"
    OTHER = "other"

    @classmethod
    def from_kty(cls, kty: str) -> KeyFamily:
        try:
            return cls(kty)
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True, slots=True)
class RSAParameters:
    """Base64url-encoded RSA modulus and exponent as published."""

    n: str
    e: str


@dataclass(frozen=True, slots=True)
class KeyRecord:
    """One key from a JWKS document.

    Attributes:
        kid: Key identifier. Uniqueness within a set is the provider's
            promise and is not checked here.
        family: Algorithm family. Only `KeyFamily.RSA` can verify tokens.
        rsa: Public parameters, present exactly when `family` is RSA.
        algorithm: Optional `alg` member.
        use: Optional `use` member (normally "sig").
        raw: The key object as received.
    """

    kid: str | None
    family: KeyFamily
    rsa: RSAParameters | None = None
    algorithm: str | None = None
    use: str | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_dict(cls, obj: Any) -> KeyRecord:
        """Build a record from one entry of a JWKS `keys` array.

        Raises:
            MalformedResponse: If the entry is not an object, has no string
                `kty`, or is an RSA key lacking string `n` / `e` members.
        """
        if not isinstance(obj, Mapping):
            raise MalformedResponse("JWK entry is not a JSON object")

        kty = obj.get("kty")
        if not isinstance(kty, str) or not kty:
            raise MalformedResponse("JWK entry has no 'kty' member")

        kid = obj.get("kid")
        if kid is not None and not isinstance(kid, str):
            raise MalformedResponse("JWK 'kid' must be a string")

        family = KeyFamily.from_kty(kty)
        rsa = None
        if family is KeyFamily.RSA:
            n, e = obj.get("n"), obj.get("e")
            if not isinstance(n, str) or not isinstance(e, str):
                raise MalformedResponse(f"RSA JWK {kid!r} is missing 'n' or 'e'")
            rsa = RSAParameters(n=n, e=e)

        return cls(
            kid=kid,
            family=family,
            rsa=rsa,
            algorithm=obj.get("alg"),
            use=obj.get("use"),
            raw=dict(obj),
        )


@dataclass(frozen=True, slots=True)
class KeySet:
    """Immutable collection of `KeyRecord` entries from one JWKS fetch."""

    keys: tuple[KeyRecord, ...] = ()

    @classmethod
    def from_dict(cls, document: Any) -> KeySet:
        """Deserialize a JWKS document (`{"keys": [...]}`).

        Raises:
            MalformedResponse: If the document or any key entry is malformed.
        """
        if not isinstance(document, Mapping):
            raise MalformedResponse("JWKS document is not a JSON object")

        keys = document.get("keys")
        if not isinstance(keys, list):
            raise MalformedResponse("JWKS document has no 'keys' array")

        return cls(keys=tuple(KeyRecord.from_dict(k) for k in keys))

    def find(self, kid: str) -> KeyRecord | None:
        """Return the first record whose `kid` equals `kid`, if any."""
        for record in self.keys:
            if record.kid == kid:
                return record
        return None

    @property
    def kids(self) -> tuple[str | None, ...]:
        """Key identifiers in document order, None for keys published without one."""
        return tuple(record.kid for record in self.keys)

    def __iter__(self) -> Iterator[KeyRecord]:
        return iter(self.keys)

    def __len__(self) -> int:
        return len(self.keys)
