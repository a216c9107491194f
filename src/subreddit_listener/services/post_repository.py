"""Storage for posts collected by the listener."""

import logging
from collections import defaultdict
from typing import Protocol

from subreddit_listener.models.post import Post, UserPosts

logger = logging.getLogger(__name__)


class PostRepository(Protocol):
    """Upsert-by-name store that ranks posts and authors."""

    async def add_or_update_post(self, post: Post) -> None: ...

    async def get_posts_ordered_by_upvotes(self, number_of_posts: int) -> list[Post]: ...

    async def get_user_posts_ordered_by_post_count(
        self, number_of_users: int
    ) -> list[UserPosts]: ...


class InMemoryPostRepository:
    """Keeps posts in a dict keyed by their fullname (e.g. ``t3_abc123``)."""

    def __init__(self):
        self._posts: dict[str, Post] = {}

    @property
    def posts(self) -> dict[str, Post]:
        """Read-only view of stored posts (useful for testing)."""
        return dict(self._posts)

    async def add_or_update_post(self, post: Post) -> None:
        previous = self._posts.get(post.name)
        self._posts[post.name] = post

        if previous is None:
            logger.info(
                "Added post '%s'. Author: %s, Up Votes: %d",
                post.name,
                post.author,
                post.upvotes,
            )
        elif previous.upvotes != post.upvotes:
            logger.info(
                "Updated post '%s'. Author: %s, Up Votes: %d -> %d",
                post.name,
                post.author,
                previous.upvotes,
                post.upvotes,
            )

    async def get_posts_ordered_by_upvotes(self, number_of_posts: int) -> list[Post]:
        """Top posts by upvotes, highest first."""
        if number_of_posts <= 0:
            raise ValueError("number_of_posts must be positive")

        return sorted(self._posts.values(), key=lambda p: p.upvotes, reverse=True)[
            :number_of_posts
        ]

    async def get_user_posts_ordered_by_post_count(self, number_of_users: int) -> list[UserPosts]:
        """Authors with the most posts, most prolific first."""
        if number_of_users <= 0:
            raise ValueError("number_of_users must be positive")

        by_author: dict[str, list[Post]] = defaultdict(list)
        for post in self._posts.values():
            by_author[post.author].append(post)

        ranked = sorted(by_author.items(), key=lambda item: len(item[1]), reverse=True)
        return [
            UserPosts(author=author, posts=posts) for author, posts in ranked[:number_of_users]
        ]
