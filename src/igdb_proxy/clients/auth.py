"""
Twitch OAuth client-credentials exchange and bearer token cache.

IGDB authenticates with Twitch app access tokens. The cache keeps one
token per process and only talks to Twitch when that token is missing
or close to expiry.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from igdb_proxy.clients.base import BaseClient
from igdb_proxy.errors import AuthError, ProxyError
from igdb_proxy.logger import get_logger

# Seconds shaved off the advertised lifetime so a token never expires mid-request
TOKEN_EXPIRY_MARGIN_SECONDS = 60


class TokenResponse(BaseModel):
    """Body of a successful client-credentials exchange."""

    access_token: str = Field(..., min_length=1)
    expires_in: int = Field(..., description="Token lifetime in seconds")
    token_type: str = Field(default="bearer")


@dataclass(frozen=True)
class AccessToken:
    """Bearer token together with the instant it stops being used."""

    value: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return self.expires_at > now


class AuthClient(BaseClient):
    """
    Client for the Twitch identity provider.

    Example:
        >>> async with AuthClient() as auth:
        ...     token, ttl = await auth.fetch_token(client_id, client_secret)
    """

    def __init__(
        self,
        *,
        token_url: str = "https://id.twitch.tv/oauth2/token",
        **kwargs: Any,
    ) -> None:
        """
        Initialize the auth client.

        Args:
            token_url: OAuth token endpoint
            **kwargs: Arguments passed to BaseClient
        """
        super().__init__(**kwargs)
        self._token_url = token_url

    @property
    def source_name(self) -> str:
        """Return source identifier."""
        return "twitch_oauth"

    @property
    def error_class(self) -> type[ProxyError]:
        return AuthError

    @property
    def error_prefix(self) -> str:
        return "Error obtaining Twitch token"

    def _parse_response(self, response: httpx.Response) -> TokenResponse:
        try:
            return TokenResponse.model_validate(response.json())
        except (ValueError, PydanticValidationError) as e:
            raise AuthError(
                f"{self.error_prefix}: unexpected response {response.text}",
                status_code=502,
                body=response.text,
                source=self.source_name,
                endpoint=self._token_url,
            ) from e

    async def fetch_token(self, client_id: str, client_secret: str) -> tuple[str, int]:
        """
        Exchange client credentials for an app access token.

        Args:
            client_id: Twitch application client ID
            client_secret: Twitch application client secret

        Returns:
            tuple[str, int]: Token value and its lifetime in seconds

        Raises:
            AuthError: If Twitch answers with a non-success status
        """
        response = await self._make_request(
            "POST",
            self._token_url,
            params={
                "client_id": client_id,
                "client_secret": client_secret,
                "grant_type": "client_credentials",
            },
        )
        token = self._parse_response(response)
        return token.access_token, token.expires_in


class TokenCache:
    """
    In-memory cache for a single bearer token.

    Concurrent callers that find the token missing or expired each
    perform their own exchange; the last one to finish wins. Both
    tokens are valid, so this only costs a redundant round trip.
    """

    def __init__(
        self,
        auth_client: AuthClient,
        client_id: str,
        client_secret: str,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._auth_client = auth_client
        self._client_id = client_id
        self._client_secret = client_secret
        self._clock = clock
        self._token: AccessToken | None = None
        self._logger = get_logger(__name__, component="token_cache")

    @property
    def current(self) -> AccessToken | None:
        """Cached token, if any, without refreshing."""
        return self._token

    async def get_token(self) -> str:
        """
        Return a usable bearer token, refreshing it if needed.

        Raises:
            AuthError: If a refresh was needed and the exchange failed
        """
        now = self._clock()
        token = self._token
        if token is not None and token.is_valid(now):
            return token.value

        self._logger.info(
            "Refreshing access token",
            reason="expired" if token is not None else "missing",
        )
        value, ttl_seconds = await self._auth_client.fetch_token(
            self._client_id, self._client_secret
        )
        self._token = AccessToken(
            value=value,
            expires_at=now + (ttl_seconds - TOKEN_EXPIRY_MARGIN_SECONDS),
        )
        self._logger.info("Access token refreshed", expires_in=ttl_seconds)
        return value

    def invalidate(self) -> None:
        """Drop the cached token so the next call performs a fresh exchange."""
        if self._token is not None:
            self._logger.info("Access token invalidated")
        self._token = None
