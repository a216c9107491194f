"""Reddit listing API client."""

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any, Optional

import httpx
from pydantic import ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from subreddit_listener.config import Config, get_config
from subreddit_listener.exceptions import MalformedResponseError, RedditAPIError
from subreddit_listener.models.api import ListingResponse
from subreddit_listener.models.post import Post
from subreddit_listener.services.authenticating_transport import AuthenticatingTransport
from subreddit_listener.utils.clock import Clock, Sleep, utc_now
from subreddit_listener.utils.rate_limiter import RateLimitingTransport

logger = logging.getLogger(__name__)


def build_transport(
    config: Config,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    clock: Optional[Clock] = None,
    sleep: Optional[Sleep] = None,
) -> RateLimitingTransport:
    """Compose the transport chain: rate limiting, then authentication, then the wire."""
    authenticating = AuthenticatingTransport(
        config,
        transport or httpx.AsyncHTTPTransport(),
        clock=clock,
    )
    return RateLimitingTransport(
        authenticating,
        clock=clock,
        sleep=sleep,
        max_retries=config.rate_limit_max_retries,
    )


class RedditApiClient:
    """Async client for Reddit listing endpoints.

    Args:
        config: Application configuration (defaults to the global config)
        transport: Innermost transport, e.g. ``httpx.MockTransport`` in tests
        clock: Returns the current UTC time
        sleep: Suspends for the given number of seconds (rate limit delays)
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleep] = None,
    ):
        self.config = config or get_config()
        self._clock = clock or utc_now
        self._sleep = sleep or asyncio.sleep
        self._transport = build_transport(self.config, transport, clock=clock, sleep=sleep)
        self._client: Optional[httpx.AsyncClient] = None

        # Posts created before this (unix seconds) are never returned.
        if self.config.application_start_time is not None:
            self.application_start_time = self.config.application_start_time
        else:
            self.application_start_time = int(self._clock().timestamp())

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.reddit_api_base_address,
                transport=self._transport,
                timeout=self.config.request_timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self) -> "RedditApiClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _get(self, endpoint: str, params: dict[str, Any]) -> httpx.Response:
        """Make a GET request through the rate limiting / authenticating chain.

        Timeouts and connection failures are retried, waiting through the
        client's sleep function between attempts.
        """
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
            stop=stop_after_attempt(3),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            sleep=self._sleep,
            reraise=True,
        ):
            with attempt:
                client = await self._get_client()
                response = await client.get(endpoint, params=params)
        return response

    async def get_posts_created_since_startup(
        self,
        subreddit: str,
        strict: bool = False,
    ) -> AsyncIterator[Post]:
        """Yield posts in ``subreddit`` created since the application started.

        Walks /r/{subreddit}/new page by page, newest first, and stops at the
        first post older than ``application_start_time`` or when Reddit
        reports no further pages. Paging is described at
        https://www.reddit.com/dev/api#listings.

        Args:
            subreddit: Subreddit name, without the ``r/`` prefix
            strict: Raise RedditAPIError on a non-success status instead of
                ending the sequence

        Raises:
            ValueError: If ``subreddit`` is blank
            AuthenticationFailedError: If an access token cannot be obtained
            MalformedResponseError: If a page cannot be decoded
        """
        if not subreddit or not subreddit.strip():
            raise ValueError("subreddit must be a non-empty name")

        endpoint = f"/r/{subreddit}/new"
        count = 0
        after: Optional[str] = None

        while True:
            params: dict[str, Any] = {"show": "all"}
            if count > 0 and after is not None:
                params["count"] = count
                params["after"] = after

            response = await self._get(endpoint, params)

            if not response.is_success:
                error = RedditAPIError(
                    f"Response status code does not indicate success: "
                    f"{response.status_code} ({response.reason_phrase})",
                    status_code=response.status_code,
                    reason_phrase=response.reason_phrase,
                )
                if strict:
                    raise error
                logger.warning("%s", error)
                return

            page = self._decode_page(response)

            # Whether every post on the page was new enough to keep paging.
            reached_start_time = False
            for child in page.data.children:
                if child.data.created_utc < self.application_start_time:
                    reached_start_time = True
                    break

                yield child.data.to_post()
                count += 1

            after = page.data.after

            # A null 'after' means Reddit has no more posts.
            if reached_start_time or after is None or not page.data.children:
                logger.debug("Finished paging r/%s after %d posts", subreddit, count)
                return

    @staticmethod
    def _decode_page(response: httpx.Response) -> ListingResponse:
        try:
            return ListingResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise MalformedResponseError(
                f"Unexpected listing response from {response.request.url}: {e}",
                url=str(response.request.url),
            ) from e
