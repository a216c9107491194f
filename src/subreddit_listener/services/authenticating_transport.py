"""Authenticating transport for the Reddit OAuth2 API.

Uses the "password" grant for script apps, as described at
https://github.com/reddit-archive/reddit/wiki/OAuth2-Quick-Start-Example.
"""

import asyncio
import base64
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

import httpx
from pydantic import ValidationError

from subreddit_listener.config import Config
from subreddit_listener.exceptions import AuthenticationFailedError
from subreddit_listener.models.api import AccessTokenResponse
from subreddit_listener.utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)

# Treat tokens as expired this long before Reddit does.
EXPIRATION_BUFFER_SECONDS = 600


@dataclass(frozen=True)
class AccessToken:
    """A bearer token and the (buffered) time it stops being used."""

    value: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


def get_user_agent(config: Config) -> str:
    """User-Agent in the format required by Reddit's API rules."""
    return config.user_agent


class AuthenticatingTransport(httpx.AsyncBaseTransport):
    """Transport that adds a bearer token and User-Agent to every request.

    The token is fetched on first use and refreshed once it expires. A single
    lock guards refreshes, so requests racing in without a valid token share
    one authentication request.
    """

    def __init__(
        self,
        config: Config,
        transport: httpx.AsyncBaseTransport,
        clock: Clock | None = None,
    ):
        self.config = config
        self._transport = transport
        self._clock = clock or utc_now
        self._lock = asyncio.Lock()
        self._token: AccessToken | None = None

    @property
    def token(self) -> AccessToken | None:
        return self._token

    def _needs_refresh(self) -> bool:
        return self._token is None or self._token.is_expired(self._clock())

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if self._needs_refresh():
            await self._refresh_token()

        request.headers["Authorization"] = f"Bearer {self._token.value}"
        request.headers["User-Agent"] = get_user_agent(self.config)

        return await self._transport.handle_async_request(request)

    async def _refresh_token(self) -> None:
        async with self._lock:
            # Another request may have refreshed the token while we waited.
            if not self._needs_refresh():
                return

            response = await self._transport.handle_async_request(self._build_auth_request())
            try:
                await response.aread()
            finally:
                await response.aclose()

            if not response.is_success:
                raise AuthenticationFailedError(
                    f"Authentication failed: {response.status_code} "
                    f"({response.reason_phrase or 'no reason given'})",
                    status_code=response.status_code,
                )

            try:
                payload = AccessTokenResponse.model_validate_json(response.content)
            except ValidationError as e:
                raise AuthenticationFailedError(
                    f"Unexpected access token response: {e}",
                    status_code=response.status_code,
                ) from e

            expires_at = self._clock() + timedelta(
                seconds=payload.expires_in - EXPIRATION_BUFFER_SECONDS
            )
            self._token = AccessToken(value=payload.access_token, expires_at=expires_at)

            logger.info("Access token set, will expire at %s", expires_at.isoformat())

    def _build_auth_request(self) -> httpx.Request:
        credentials = f"{self.config.reddit_app_client_id}:{self.config.reddit_app_client_secret}"
        encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")

        return httpx.Request(
            "POST",
            self.config.reddit_api_authorization_url,
            headers={
                "Authorization": f"Basic {encoded}",
                "User-Agent": get_user_agent(self.config),
            },
            data={
                "grant_type": "password",
                "username": self.config.reddit_username,
                "password": self.config.reddit_password,
            },
        )

    async def aclose(self) -> None:
        await self._transport.aclose()
