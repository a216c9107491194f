"""Keeps the post repository in sync with a subreddit."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Optional

from subreddit_listener.config import Config
from subreddit_listener.services.post_repository import PostRepository
from subreddit_listener.services.reddit_api_client import RedditApiClient

logger = logging.getLogger(__name__)


class SubredditListener:
    """Copies new posts from a subreddit into a repository."""

    def __init__(
        self,
        api_client: RedditApiClient,
        repository: PostRepository,
        config: Config,
    ):
        self.api_client = api_client
        self.repository = repository
        self.config = config
        # Exception from the most recent synchronization, or None if it succeeded.
        self.last_error: Optional[Exception] = None

    async def synchronize_posts(self) -> int:
        """Fetch posts created since startup and upsert them.

        Failures are logged rather than raised so that a periodic caller can
        simply try again on its next run. The failure is kept in `last_error`.

        Returns:
            Number of posts stored during this run
        """
        subreddit = self.config.subreddit_name
        stored = 0

        try:
            logger.debug("Synchronizing '%s' posts...", subreddit)

            async for post in self.api_client.get_posts_created_since_startup(subreddit):
                await self.repository.add_or_update_post(post)
                stored += 1

            logger.info("Synchronized %d '%s' posts", stored, subreddit)
            self.last_error = None
        except Exception as e:
            self.last_error = e
            logger.exception("Error synchronizing '%s' posts", subreddit)

        return stored

    async def run_periodically(
        self,
        interval: float,
        stop_event: Optional[asyncio.Event] = None,
        on_synchronized: Optional[Callable[[int], Awaitable[None]]] = None,
    ) -> None:
        """Synchronize every ``interval`` seconds until ``stop_event`` is set.

        ``on_synchronized`` is awaited after each run with the number of
        posts stored.
        """
        stop_event = stop_event or asyncio.Event()

        while not stop_event.is_set():
            stored = await self.synchronize_posts()
            if on_synchronized is not None:
                await on_synchronized(stored)
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue

        logger.debug("Stopped listening to '%s'", self.config.subreddit_name)
