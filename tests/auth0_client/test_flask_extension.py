"""
Tests for the AuthExtension Flask integration.
"""

from typing import Any

import httpx
import pytest
from flask import Flask, g

import auth0_client as m

AUTHORITY = "https://tenant.example.com"


class OkVerifier:
    """TokenVerifier stub that accepts 'GOOD' tokens."""

    def verify(self, token: str) -> dict[str, Any]:
        if token == "EXPIRED":
            raise m.ExpiredToken("expired", reason=Exception("exp"))
        if token != "GOOD":
            raise m.MalformedToken("Invalid token")
        return {"sub": "u1", "email": "user@example.com"}


def protected_app(app: Flask, auth: m.AuthExtension) -> Flask:
    @app.get("/x")
    @auth.require()
    def x():  # type: ignore
        return {"sub": g.jwt["sub"]}

    return app


class TestAuthExtensionBasics:
    def test_missing_token_returns_401(self, app: Flask):
        c = protected_app(app, m.AuthExtension(verifier=OkVerifier())).test_client()
        assert c.get("/x").status_code == 401

    def test_invalid_token_returns_401(self, app: Flask):
        c = protected_app(app, m.AuthExtension(verifier=OkVerifier())).test_client()
        r = c.get("/x", headers={"Authorization": "Bearer BAD"})
        assert r.status_code == 401

    def test_expired_token_returns_401(self, app: Flask):
        c = protected_app(app, m.AuthExtension(verifier=OkVerifier())).test_client()
        r = c.get("/x", headers={"Authorization": "Bearer EXPIRED"})
        assert r.status_code == 401
        assert b"Expired token" in r.data

    def test_valid_token_sets_g_jwt(self, app: Flask):
        c = protected_app(app, m.AuthExtension(verifier=OkVerifier())).test_client()
        r = c.get("/x", headers={"Authorization": "Bearer GOOD"})
        assert r.status_code == 200
        assert r.get_json() == {"sub": "u1"}

    def test_cookie_extractor(self, app: Flask):
        auth = m.AuthExtension(verifier=OkVerifier(), extractor=m.CookieExtractor())
        c = protected_app(app, auth).test_client()
        c.set_cookie("access_token", "GOOD")
        assert c.get("/x").status_code == 200

    def test_init_app_registers_and_sets_verifier(self, app: Flask):
        auth = m.AuthExtension()
        auth.init_app(app, verifier=OkVerifier())

        assert app.extensions["auth0_client"] is auth
        c = protected_app(app, auth).test_client()
        assert c.get("/x", headers={"Authorization": "Bearer GOOD"}).status_code == 200

    def test_without_verifier_is_an_error(self, app: Flask):
        app.config["TESTING"] = False
        c = protected_app(app, m.AuthExtension()).test_client()
        assert c.get("/x", headers={"Authorization": "Bearer GOOD"}).status_code == 500


class TestAuthExtensionWithJWKSVerifier:
    @pytest.fixture
    def policy(self) -> m.ValidationPolicy:
        return m.ValidationPolicy(verify_aud=False, required_claims=frozenset({"sub"}))

    def test_signed_token_is_accepted(
        self, app, jwks_server, http_client, jwks_doc, make_token, policy
    ):
        jwks_server.serve(jwks_doc("abc"))
        auth = m.AuthExtension(m.JWKSVerifier(AUTHORITY, policy, http_client=http_client))
        c = protected_app(app, auth).test_client()

        for sub in ("a", "b"):
            token = make_token({"sub": sub, "exp": 4102444800})
            r = c.get("/x", headers={"Authorization": f"Bearer {token}"})
            assert r.status_code == 200
            assert r.get_json() == {"sub": sub}

        assert jwks_server.calls == 1

    def test_unknown_kid_returns_401(
        self, app, jwks_server, http_client, jwks_doc, make_token, policy
    ):
        jwks_server.serve(jwks_doc("xyz"))
        auth = m.AuthExtension(m.JWKSVerifier(AUTHORITY, policy, http_client=http_client))
        c = protected_app(app, auth).test_client()

        r = c.get("/x", headers={"Authorization": f"Bearer {make_token(kid='abc')}"})
        assert r.status_code == 401

    def test_unreachable_jwks_returns_503(
        self, app, jwks_server, http_client, make_token, policy
    ):
        jwks_server.serve({})
        jwks_server.error = httpx.ConnectError("connection refused")
        auth = m.AuthExtension(m.JWKSVerifier(AUTHORITY, policy, http_client=http_client))
        c = protected_app(app, auth).test_client()

        r = c.get("/x", headers={"Authorization": f"Bearer {make_token()}"})
        assert r.status_code == 503
