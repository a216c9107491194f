"""Exceptions for Subreddit Listener.

Exception Hierarchy:
    SubredditListenerError (base)
    ├── ConfigurationError (missing or malformed settings)
    ├── AuthenticationFailedError (token endpoint rejected us or sent a bad payload)
    ├── RedditAPIError (listing endpoint returned a non-success status)
    ├── MalformedResponseError (listing body missing required fields)
    └── RateLimitExceededError (429 retry ceiling exceeded, only when configured)

Usage:
    - AuthenticationFailedError and MalformedResponseError stop the current
      pagination run; SubredditListener logs them and tries again next run.
    - RedditAPIError is never raised out of the paginator; a non-success
      listing status ends the sequence with a warning.
    - Throttling itself is handled inside RateLimitingTransport and is not
      an error unless a retry ceiling was configured.
"""

__all__ = [
    "SubredditListenerError",
    "ConfigurationError",
    "AuthenticationFailedError",
    "RedditAPIError",
    "MalformedResponseError",
    "RateLimitExceededError",
]


class SubredditListenerError(Exception):
    """Base exception for all Subreddit Listener errors."""

    pass


class ConfigurationError(SubredditListenerError):
    """Raised when a setting is missing or cannot be parsed."""

    pass


class AuthenticationFailedError(SubredditListenerError):
    """Raised when an access token could not be obtained."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class RedditAPIError(SubredditListenerError):
    """A Reddit API response with a non-success status code."""

    def __init__(self, message: str, status_code: int, reason_phrase: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.reason_phrase = reason_phrase


class MalformedResponseError(SubredditListenerError):
    """Raised when a listing response cannot be decoded."""

    def __init__(self, message: str, url: str | None = None):
        super().__init__(message)
        self.url = url


class RateLimitExceededError(SubredditListenerError):
    """Raised when a request is still throttled after the configured retries.

    The default RateLimitingTransport has no ceiling and never raises this.
    """

    def __init__(self, message: str, retries: int, reset_seconds: float):
        super().__init__(message)
        self.retries = retries
        self.reset_seconds = reset_seconds
