"""Subreddit Listener - Poll a subreddit and rank its new posts.

This SDK provides:
- An httpx transport chain that authenticates against Reddit's OAuth2 API
  and honours its rate limit headers
- A paginated client for posts created since the application started
- An in-memory repository ranking posts by upvotes and authors by post count

Example usage:
    ```python
    from subreddit_listener import Config, SubredditListenerSDK

    async with SubredditListenerSDK(Config.from_env()) as sdk:
        await sdk.synchronize()
        for post in (await sdk.top_posts(10)).data:
            print(post.upvotes, post.title)
    ```
"""

from importlib.metadata import PackageNotFoundError, version

from subreddit_listener.config import Config
from subreddit_listener.exceptions import (
    AuthenticationFailedError,
    ConfigurationError,
    MalformedResponseError,
    RateLimitExceededError,
    RedditAPIError,
    SubredditListenerError,
)
from subreddit_listener.models import Listing, Post, UserPosts
from subreddit_listener.sdk import SubredditListenerSDK

try:
    __version__ = version("subreddit-listener")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"

__all__ = [
    # Main SDK class
    "SubredditListenerSDK",
    # Configuration
    "Config",
    # Exceptions
    "SubredditListenerError",
    "ConfigurationError",
    "AuthenticationFailedError",
    "RedditAPIError",
    "MalformedResponseError",
    "RateLimitExceededError",
    # Models
    "Post",
    "UserPosts",
    "Listing",
]
