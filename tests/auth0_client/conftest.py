import json
import time
from collections.abc import Callable
from typing import Any

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from flask import Flask
from jwt.algorithms import RSAAlgorithm

AUTHORITY = "https://tenant.example.com"
JWKS_URL = f"{AUTHORITY}/.well-known/jwks.json"


def _generate_key() -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key() -> rsa.RSAPrivateKey:
    return _generate_key()


@pytest.fixture(scope="session")
def other_private_key() -> rsa.RSAPrivateKey:
    return _generate_key()


@pytest.fixture
def make_jwk(private_key: rsa.RSAPrivateKey):
    """
    Factory fixture for public RSA JWK dicts.

    Usage in tests:
        jwk = make_jwk(kid="abc")
    """

    def _make(*, kid: str = "abc", key: rsa.RSAPrivateKey | None = None) -> dict[str, Any]:
        jwk = json.loads(RSAAlgorithm.to_jwk((key or private_key).public_key()))
        jwk.update({"kid": kid, "use": "sig", "alg": "RS256"})
        return jwk

    return _make


@pytest.fixture
def make_token(private_key: rsa.RSAPrivateKey):
    """
    Factory fixture for signed tokens.

    Usage in tests:
        token = make_token({"sub": "u1"}, kid="abc")
        token = make_token({"sub": "u1"}, kid=None)  # header without kid
    """

    def _make(
        claims: dict[str, Any] | None = None,
        *,
        kid: str | None = "abc",
        key: rsa.RSAPrivateKey | None = None,
        algorithm: str = "RS256",
    ) -> str:
        if claims is None:
            claims = {"sub": "user-1", "exp": int(time.time()) + 600}
        headers = {"kid": kid} if kid is not None else None
        return jwt.encode(claims, key or private_key, algorithm=algorithm, headers=headers)

    return _make


class FakeJWKSServer:
    """
    Serves JWKS documents through httpx.MockTransport and counts requests.

    Documents are served in order; the last one repeats once the queue runs out.
    """

    def __init__(self) -> None:
        self.documents: list[Any] = []
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.error: Exception | None = None

    def serve(self, *documents: Any) -> "FakeJWKSServer":
        self.documents = list(documents)
        return self

    @property
    def calls(self) -> int:
        return len(self.requests)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        doc = self.documents.pop(0) if len(self.documents) > 1 else self.documents[0]
        if isinstance(doc, str):
            return httpx.Response(self.status_code, text=doc)
        return httpx.Response(self.status_code, json=doc)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def jwks_server() -> FakeJWKSServer:
    return FakeJWKSServer()


@pytest.fixture
def http_client(jwks_server: FakeJWKSServer):
    client = jwks_server.client()
    yield client
    client.close()


@pytest.fixture
def jwks_doc(make_jwk: Callable[..., dict[str, Any]]) -> Callable[..., dict[str, Any]]:
    """Build a JWKS document holding RSA keys for the given kids."""

    def _make(*kids: str) -> dict[str, Any]:
        return {"keys": [make_jwk(kid=kid) for kid in kids]}

    return _make


@pytest.fixture()
def app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app
