"""Access token acquisition against an Auth0 token endpoint.

`Auth0Client` posts a JSON body to `{domain}/oauth/token` and keeps the
returned access token:

- `authenticate()` uses the configured grant (client credentials by default)
- `authenticate_user()` uses the resource-owner password grant
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Final, Self

import httpx

from .config import Auth0Settings
from .errors import MalformedResponse, TransportError
from .logging import get_logger
from .urls import token_url

DEFAULT_TIMEOUT: Final[float] = 10.0

logger = get_logger(__name__)


class GrantType(StrEnum):
    """OAuth grant sent as `grant_type` to the token endpoint."""

    CLIENT_CREDENTIALS = "client_credentials"
    PASSWORD = "password"


@dataclass(frozen=True, slots=True)
class AccessTokenResponse:
    """Token endpoint response. Only `access_token` is required."""

    access_token: str
    token_type: str | None = None
    expires_in: int | None = None
    scope: str | None = None

    @classmethod
    def from_dict(cls, body: Any) -> AccessTokenResponse:
        """Parse a decoded token endpoint body.

        Raises:
            MalformedResponse: If `body` is not an object or has no string
                `access_token`.
        """
        if not isinstance(body, Mapping):
            raise MalformedResponse("Token response is not a JSON object")

        access_token = body.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise MalformedResponse("Token response has no 'access_token'")

        return cls(
            access_token=access_token,
            token_type=body.get("token_type"),
            expires_in=body.get("expires_in"),
            scope=body.get("scope"),
        )


class Auth0Client:
    """Client-credentials / password-grant client for one Auth0 application.

    Example:
        ```python
        with Auth0Client("client_id", "client_secret", "tenant.auth0.com", "https://api") as client:
            token = client.authenticate()
        ```

    Args:
        client_id: Application client id.
        client_secret: Application client secret. Never logged.
        domain: Tenant domain, with or without scheme.
        audience: API identifier tokens are requested for.
        grant_type: Grant used by `authenticate()`.
        http_client: Client to send requests with. One is created (and closed
            by `close()`) when omitted.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        domain: str,
        audience: str,
        *,
        grant_type: GrantType = GrantType.CLIENT_CREDENTIALS,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.client_id = client_id
        self.domain = domain
        self.audience = audience
        self.grant_type = grant_type
        self._client_secret = client_secret
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=DEFAULT_TIMEOUT)
        self._access_token: str | None = None

    @classmethod
    def from_settings(cls, settings: Auth0Settings, **kwargs: Any) -> Self:
        """Build a client from loaded settings.

        Args:
            settings: Tenant domain, credentials and audience.
            **kwargs: Forwarded to the constructor (`grant_type`, `http_client`).
        """
        return cls(
            settings.client_id,
            settings.client_secret,
            settings.domain,
            settings.audience,
            **kwargs,
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> Self:
        """Build a client from `Auth0Settings.from_env()`."""
        return cls.from_settings(Auth0Settings.from_env(), **kwargs)

    @property
    def access_token(self) -> str | None:
        """Token from the last successful authentication, or None."""
        return self._access_token

    @property
    def token_url(self) -> str:
        """Normalized `{domain}/oauth/token` URL."""
        return token_url(self.domain)

    def _base_body(self, grant_type: GrantType) -> dict[str, str]:
        return {
            "grant_type": str(grant_type),
            "client_id": self.client_id,
            "client_secret": self._client_secret,
            "audience": self.audience,
        }

    def authenticate(self) -> str:
        """Request a token with the configured grant and store it."""
        response = self.authenticate_with_body(self._base_body(self.grant_type))
        self._access_token = response.access_token
        return response.access_token

    def authenticate_user(self, username: str, password: str) -> str:
        """Request a token for a user with the password grant and store it."""
        body = self._base_body(GrantType.PASSWORD)
        body["username"] = username
        body["password"] = password

        response = self.authenticate_with_body(body)
        self._access_token = response.access_token
        return response.access_token

    def authenticate_with_body(self, body: Mapping[str, str]) -> AccessTokenResponse:
        """POST `body` to the token endpoint and parse the response.

        Raises:
            TransportError: The request failed or returned a non-2xx status.
            MalformedResponse: The body is not a token response.
        """
        url = self.token_url
        logger.debug("auth_token_requested", url=url, grant_type=body.get("grant_type"))

        try:
            response = self._http.post(url, json=dict(body))
        except httpx.HTTPError as e:
            raise TransportError(f"Token request to {url} failed: {e}") from e

        logger.debug("auth_token_response", url=url, status=response.status_code)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportError(
                f"Token endpoint {url} answered {response.status_code}"
            ) from e

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponse(f"Token response from {url} is not JSON") from e

        return AccessTokenResponse.from_dict(payload)

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
