"""Rate limiting transport for Reddit API requests.

Reddit reports quota on every response:

    X-Ratelimit-Remaining: requests left in the current window
    X-Ratelimit-Reset:     seconds until the window resets

When the remaining count drops below one, the next request waits for the
reset. A 429 response carrying those headers is retried after the reset.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import httpx

from subreddit_listener.exceptions import RateLimitExceededError
from subreddit_listener.utils.clock import Clock, Sleep, utc_now
from subreddit_listener.utils.requests import clone_request

logger = logging.getLogger(__name__)

REMAINING_HEADER = "X-Ratelimit-Remaining"
RESET_HEADER = "X-Ratelimit-Reset"

# Reddit windows last ten minutes; longer resets are capped.
MAX_RESET_SECONDS = 3600.0


def format_time_remaining(seconds: float) -> str:
    """Format seconds into a human-friendly string."""
    if seconds <= 0:
        return "now"

    seconds = int(seconds)

    if seconds < 60:
        return f"{seconds} second{'s' if seconds != 1 else ''}"
    elif seconds < 3600:
        minutes = seconds // 60
        secs = seconds % 60
        if secs > 0:
            return f"{minutes} min {secs} sec"
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    else:
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        if minutes > 0:
            return f"{hours} hr {minutes} min"
        return f"{hours} hour{'s' if hours != 1 else ''}"


@dataclass
class Quota:
    """Rate limit information reported by a single response."""

    remaining: float
    reset_seconds: float

    @property
    def is_exhausted(self) -> bool:
        return self.remaining < 1

    @classmethod
    def from_headers(cls, headers: httpx.Headers) -> "Quota | None":
        """Parse quota headers, or None if either is absent or not a finite number.

        The reset is clamped to `[0, MAX_RESET_SECONDS]`.
        """
        remaining = _parse_float(headers.get(REMAINING_HEADER))
        reset_seconds = _parse_float(headers.get(RESET_HEADER))
        if remaining is None or reset_seconds is None:
            return None
        reset_seconds = min(max(reset_seconds, 0.0), MAX_RESET_SECONDS)
        return cls(remaining=remaining, reset_seconds=reset_seconds)


def _parse_float(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        parsed = float(value)
    except ValueError:
        return None
    if not math.isfinite(parsed):
        return None
    return parsed


@dataclass
class RateLimitState:
    """When the next request may be sent."""

    delay_until: datetime = field(
        default_factory=lambda: datetime.min.replace(tzinfo=timezone.utc)
    )

    def seconds_until_allowed(self, now: datetime) -> float:
        return (self.delay_until - now).total_seconds()


class RateLimitingTransport(httpx.AsyncBaseTransport):
    """Transport that honours Reddit's rate limit headers.

    Args:
        transport: The next transport in the chain
        clock: Returns the current UTC time
        sleep: Suspends for the given number of seconds
        max_retries: Give up on a 429 after this many retries
            (None retries for as long as the server keeps throttling)
    """

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport,
        clock: Clock | None = None,
        sleep: Sleep | None = None,
        max_retries: int | None = None,
    ):
        self._transport = transport
        self._clock = clock or utc_now
        self._sleep = sleep or asyncio.sleep
        self.max_retries = max_retries
        self.state = RateLimitState()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        # The previous response told us we are out of requests until the reset.
        wait = self.state.seconds_until_allowed(self._clock())
        if wait > 0:
            logger.info(
                "Delaying for %s because the previous response was the last one "
                "before rate limiting starts",
                format_time_remaining(wait),
            )
            await self._sleep(wait)

        # Buffer the body so the request can be cloned after it is sent.
        await request.aread()
        response = await self._transport.handle_async_request(request)

        retries = 0
        while True:
            quota = Quota.from_headers(response.headers)
            if quota is None or not quota.is_exhausted:
                break

            self.state.delay_until = self._clock() + timedelta(seconds=quota.reset_seconds)

            if response.status_code != httpx.codes.TOO_MANY_REQUESTS:
                break

            retries += 1
            if self.max_retries is not None and retries > self.max_retries:
                await response.aclose()
                raise RateLimitExceededError(
                    f"Still rate limited after {self.max_retries} retries of "
                    f"{request.method} {request.url}",
                    retries=self.max_retries,
                    reset_seconds=quota.reset_seconds,
                )

            logger.info(
                "Delaying for %s because the server returned 429 Too Many Requests "
                "(retry %d)",
                format_time_remaining(quota.reset_seconds),
                retries,
            )
            await response.aclose()
            await self._sleep(quota.reset_seconds)

            # A sent request cannot be reused, so retry a copy of it.
            request = await clone_request(request)
            response = await self._transport.handle_async_request(request)

        return response

    async def aclose(self) -> None:
        await self._transport.aclose()
