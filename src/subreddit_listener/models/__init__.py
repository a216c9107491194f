"""Data models for Subreddit Listener."""

from subreddit_listener.models.api import (
    AccessTokenResponse,
    ListingChild,
    ListingData,
    ListingPostData,
    ListingResponse,
)
from subreddit_listener.models.post import Listing, Post, UserPosts, score

__all__ = [
    "Post",
    "UserPosts",
    "Listing",
    "score",
    "AccessTokenResponse",
    "ListingResponse",
    "ListingData",
    "ListingChild",
    "ListingPostData",
]
