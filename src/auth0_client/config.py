"""Process configuration for talking to an Auth0 tenant.

Values come from the environment, after loading a `.env` file if present:

    AUTH0_DOMAIN          tenant domain, e.g. "tenant.eu.auth0.com"
    AUTH0_CLIENT_ID       application client id
    AUTH0_CLIENT_SECRET   application client secret
    AUTH0_AUDIENCE        API identifier tokens are requested for
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Final

from dotenv import load_dotenv

from .errors import ConfigurationError
from .urls import with_scheme

ENV_VARS: Final[dict[str, str]] = {
    "domain": "AUTH0_DOMAIN",
    "client_id": "AUTH0_CLIENT_ID",
    "client_secret": "AUTH0_CLIENT_SECRET",
    "audience": "AUTH0_AUDIENCE",
}


@dataclass(frozen=True, slots=True)
class Auth0Settings:
    domain: str
    client_id: str
    client_secret: str = field(repr=False)
    audience: str

    @property
    def authority(self) -> str:
        """Base URL of the tenant, also where its JWKS is published."""
        return with_scheme(self.domain).rstrip("/")

    @property
    def issuer(self) -> str:
        """Issuer claim Auth0 puts in tokens (note the trailing slash)."""
        return f"{self.authority}/"

    @classmethod
    def from_env(cls, dotenv_path: str | os.PathLike[str] | None = None) -> Auth0Settings:
        """Load settings from the environment.

        Raises:
            ConfigurationError: Naming every variable that is unset or empty.
        """
        load_dotenv(dotenv_path)

        values = {name: os.environ.get(var, "").strip() for name, var in ENV_VARS.items()}
        missing = [ENV_VARS[name] for name, value in values.items() if not value]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        return cls(**values)
