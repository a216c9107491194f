"""Utility modules for Subreddit Listener."""

from subreddit_listener.utils.clock import utc_now
from subreddit_listener.utils.rate_limiter import (
    Quota,
    RateLimitingTransport,
    RateLimitState,
    format_time_remaining,
)
from subreddit_listener.utils.requests import clone_request

__all__ = [
    "RateLimitingTransport",
    "RateLimitState",
    "Quota",
    "format_time_remaining",
    "clone_request",
    "utc_now",
]
