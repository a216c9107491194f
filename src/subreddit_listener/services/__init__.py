"""Services for collecting subreddit posts."""

from subreddit_listener.services.authenticating_transport import AuthenticatingTransport
from subreddit_listener.services.post_repository import InMemoryPostRepository, PostRepository
from subreddit_listener.services.reddit_api_client import RedditApiClient
from subreddit_listener.services.subreddit_listener import SubredditListener

__all__ = [
    "AuthenticatingTransport",
    "RedditApiClient",
    "PostRepository",
    "InMemoryPostRepository",
    "SubredditListener",
]
