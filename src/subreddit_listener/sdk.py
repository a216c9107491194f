"""Subreddit Listener SDK - High-level API for ranking new subreddit posts."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Optional

import httpx

from subreddit_listener.config import Config, get_config
from subreddit_listener.exceptions import SubredditListenerError
from subreddit_listener.models.post import Listing, Post, UserPosts
from subreddit_listener.services.post_repository import InMemoryPostRepository, PostRepository
from subreddit_listener.services.reddit_api_client import RedditApiClient
from subreddit_listener.services.subreddit_listener import SubredditListener
from subreddit_listener.utils.clock import Clock, Sleep

logger = logging.getLogger(__name__)


class SubredditListenerSDK:
    """High-level SDK that listens to a subreddit and ranks its new posts.

    Example usage:
        ```python
        from subreddit_listener import Config, SubredditListenerSDK

        async with SubredditListenerSDK(Config.from_env()) as sdk:
            await sdk.synchronize()
            top = await sdk.top_posts(10)
        ```

    Args:
        config: Application configuration (defaults to the global config)
        repository: Post store (defaults to an in-memory repository)
        transport: Innermost HTTP transport
        clock: Returns the current UTC time
        sleep: Suspends for the given number of seconds
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        repository: Optional[PostRepository] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Clock] = None,
        sleep: Optional[Sleep] = None,
    ):
        self._config = config or get_config()
        self._repository = repository or InMemoryPostRepository()
        self._transport = transport
        self._clock = clock
        self._sleep = sleep
        self._api_client: Optional[RedditApiClient] = None
        self._listener: Optional[SubredditListener] = None
        self._initialized = False

    @property
    def subreddit(self) -> str:
        return self._config.subreddit_name

    @property
    def last_error(self) -> Optional[Exception]:
        """Exception from the most recent synchronization, if it failed."""
        if self._listener is None:
            return None
        return self._listener.last_error

    async def __aenter__(self) -> "SubredditListenerSDK":
        """Async context manager entry."""
        await self._initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def _initialize(self) -> None:
        """Initialize clients."""
        if self._initialized:
            return

        self._api_client = RedditApiClient(
            config=self._config,
            transport=self._transport,
            clock=self._clock,
            sleep=self._sleep,
        )
        self._listener = SubredditListener(self._api_client, self._repository, self._config)

        self._initialized = True
        logger.debug("SubredditListenerSDK initialized for r/%s", self.subreddit)

    async def close(self) -> None:
        """Close all HTTP connections."""
        if self._api_client:
            await self._api_client.close()
        self._initialized = False
        logger.debug("SubredditListenerSDK closed")

    def _ensure_initialized(self) -> None:
        """Ensure the client is initialized."""
        if not self._initialized:
            raise SubredditListenerError(
                "Client not initialized. Use 'async with SubredditListenerSDK(...) as sdk:'"
            )

    async def synchronize(self) -> int:
        """Run one synchronization pass and return the number of posts stored."""
        self._ensure_initialized()
        return await self._listener.synchronize_posts()

    async def top_posts(self, count: int = 10) -> Listing[Post]:
        """Posts ranked by upvotes."""
        self._ensure_initialized()
        posts = await self._repository.get_posts_ordered_by_upvotes(count)
        return Listing[Post](data=posts)

    async def top_users(self, count: int = 10) -> Listing[UserPosts]:
        """Authors ranked by number of posts."""
        self._ensure_initialized()
        users = await self._repository.get_user_posts_ordered_by_post_count(count)
        return Listing[UserPosts](data=users)

    async def run(
        self,
        interval: Optional[float] = None,
        stop_event: Optional[asyncio.Event] = None,
        on_synchronized: Optional[Callable[[int], Awaitable[None]]] = None,
    ) -> None:
        """Synchronize periodically until ``stop_event`` is set.

        Args:
            interval: Seconds between runs (defaults to ``config.poll_interval``)
            stop_event: Set it to stop listening
            on_synchronized: Awaited after each run with the number of posts stored
        """
        self._ensure_initialized()
        await self._listener.run_periodically(
            interval if interval is not None else self._config.poll_interval,
            stop_event=stop_event,
            on_synchronized=on_synchronized,
        )
