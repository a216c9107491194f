"""Tests for rate limiter module."""

import asyncio
from datetime import timedelta

import httpx
import pytest

from subreddit_listener.exceptions import RateLimitExceededError
from subreddit_listener.utils.rate_limiter import (
    MAX_RESET_SECONDS,
    Quota,
    RateLimitingTransport,
    format_time_remaining,
)


def rate_limited(status: int, remaining: str, reset: str) -> httpx.Response:
    return httpx.Response(
        status,
        headers={"X-Ratelimit-Remaining": remaining, "X-Ratelimit-Reset": reset},
    )


def recording_transport(events: list[str], *responses: httpx.Response):
    """MockTransport returning `responses` in order and logging each send."""
    queue = list(responses)
    sent: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        sent.append(request)
        events.append(f"SendAsync: {request.url.path}")
        return queue.pop(0)

    return httpx.MockTransport(handler), sent


class TestFormatTimeRemaining:
    """Tests for format_time_remaining function."""

    def test_zero_seconds(self):
        assert format_time_remaining(0) == "now"

    def test_negative_seconds(self):
        assert format_time_remaining(-10) == "now"

    def test_seconds_only(self):
        assert format_time_remaining(30) == "30 seconds"
        assert format_time_remaining(1) == "1 second"

    def test_minutes_and_seconds(self):
        assert format_time_remaining(90) == "1 min 30 sec"
        assert format_time_remaining(120) == "2 minutes"

    def test_hours_and_minutes(self):
        assert format_time_remaining(3600) == "1 hour"
        assert format_time_remaining(5400) == "1 hr 30 min"


class TestQuota:
    """Tests for parsing rate limit headers."""

    def test_parses_float_values(self):
        quota = Quota.from_headers(
            httpx.Headers({"x-ratelimit-remaining": "0.0", "X-RATELIMIT-RESET": "42"})
        )
        assert quota == Quota(remaining=0.0, reset_seconds=42.0)
        assert quota.is_exhausted

    def test_not_exhausted_with_one_remaining(self):
        quota = Quota.from_headers(
            httpx.Headers({"X-Ratelimit-Remaining": "1", "X-Ratelimit-Reset": "42"})
        )
        assert quota.is_exhausted is False

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"X-Ratelimit-Remaining": "0"},
            {"X-Ratelimit-Reset": "10"},
            {"X-Ratelimit-Remaining": "none", "X-Ratelimit-Reset": "10"},
            {"X-Ratelimit-Remaining": "0", "X-Ratelimit-Reset": "soon"},
            {"X-Ratelimit-Remaining": "0", "X-Ratelimit-Reset": "nan"},
            {"X-Ratelimit-Remaining": "0", "X-Ratelimit-Reset": "inf"},
            {"X-Ratelimit-Remaining": "-inf", "X-Ratelimit-Reset": "10"},
        ],
    )
    def test_missing_or_invalid_headers(self, headers):
        assert Quota.from_headers(httpx.Headers(headers)) is None

    @pytest.mark.parametrize(
        "reset,expected",
        [
            ("-5", 0.0),
            ("1e20", MAX_RESET_SECONDS),
            ("600", 600.0),
        ],
    )
    def test_reset_is_clamped(self, reset, expected):
        quota = Quota.from_headers(
            httpx.Headers({"X-Ratelimit-Remaining": "0", "X-Ratelimit-Reset": reset})
        )
        assert quota.reset_seconds == expected


class TestRateLimitingTransport:
    """Tests for RateLimitingTransport."""

    @pytest.mark.asyncio
    async def test_exhausted_quota_delays_next_request(self, clock, sleep, events):
        inner, _ = recording_transport(
            events,
            rate_limited(200, "1", "15"),  # Rate limit not yet reached.
            rate_limited(200, "0", "10"),  # Rate limit reached, resets in 10 seconds.
            rate_limited(200, "100", "60"),
        )
        transport = RateLimitingTransport(inner, clock=clock, sleep=sleep)

        await transport.handle_async_request(httpx.Request("GET", "https://oauth.reddit.com/test1"))
        await transport.handle_async_request(httpx.Request("GET", "https://oauth.reddit.com/test2"))
        await transport.handle_async_request(httpx.Request("GET", "https://oauth.reddit.com/test3"))

        assert events == [
            "SendAsync: /test1",
            "SendAsync: /test2",
            "Delay: 10",
            "SendAsync: /test3",
        ]

    @pytest.mark.asyncio
    async def test_exhausted_quota_returns_response_unmodified(self, clock, sleep, events):
        last_allowed = rate_limited(200, "0", "10")
        inner, sent = recording_transport(events, last_allowed)
        transport = RateLimitingTransport(inner, clock=clock, sleep=sleep)

        response = await transport.handle_async_request(
            httpx.Request("GET", "https://oauth.reddit.com/test1")
        )

        assert response is last_allowed
        assert len(sent) == 1
        assert sleep.delays == []
        assert transport.state.delay_until == clock.now + timedelta(seconds=10)

    @pytest.mark.asyncio
    async def test_429_responses_are_retried_after_delay(self, clock, sleep, events):
        inner, _ = recording_transport(
            events,
            rate_limited(429, "0", "10"),
            rate_limited(429, "0", "5"),
            rate_limited(200, "100", "60"),
        )
        transport = RateLimitingTransport(inner, clock=clock, sleep=sleep)

        response = await transport.handle_async_request(
            httpx.Request("GET", "https://oauth.reddit.com/test1")
        )

        assert response.status_code == 200
        assert events == [
            "SendAsync: /test1",
            "Delay: 10",
            "SendAsync: /test1",
            "Delay: 5",
            "SendAsync: /test1",
        ]

    @pytest.mark.asyncio
    async def test_retried_request_is_an_equivalent_copy(self, clock, sleep, events):
        inner, sent = recording_transport(
            events,
            rate_limited(429, "0", "1"),
            rate_limited(200, "10", "60"),
        )
        transport = RateLimitingTransport(inner, clock=clock, sleep=sleep)
        request = httpx.Request(
            "POST",
            "https://oauth.reddit.com/api/submit?kind=self",
            headers={"X-Custom": "yes"},
            content=b"title=hello",
        )

        await transport.handle_async_request(request)

        first, retry = sent
        assert retry is not first
        assert retry.method == first.method == "POST"
        assert retry.url == first.url
        assert retry.headers["X-Custom"] == "yes"
        assert retry.content == first.content == b"title=hello"

    @pytest.mark.asyncio
    async def test_429_without_rate_limit_headers_is_returned(self, clock, sleep, events):
        inner, sent = recording_transport(events, httpx.Response(429))
        transport = RateLimitingTransport(inner, clock=clock, sleep=sleep)

        response = await transport.handle_async_request(
            httpx.Request("GET", "https://oauth.reddit.com/test1")
        )

        assert response.status_code == 429
        assert len(sent) == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_non_numeric_headers_never_delay(self, clock, sleep, events):
        inner, _ = recording_transport(
            events,
            rate_limited(200, "zero", "10"),
            rate_limited(200, "0", "later"),
            rate_limited(200, "100", "60"),
        )
        transport = RateLimitingTransport(inner, clock=clock, sleep=sleep)

        for path in ("/a", "/b", "/c"):
            await transport.handle_async_request(
                httpx.Request("GET", f"https://oauth.reddit.com{path}")
            )

        assert sleep.delays == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reset", ["nan", "inf", "-inf"])
    async def test_non_finite_reset_never_delays(self, clock, sleep, events, reset):
        inner, sent = recording_transport(
            events,
            rate_limited(200, "0", reset),
            rate_limited(429, "0", reset),
            rate_limited(200, "100", "60"),
        )
        transport = RateLimitingTransport(inner, clock=clock, sleep=sleep)

        for path in ("/a", "/b", "/c"):
            await transport.handle_async_request(
                httpx.Request("GET", f"https://oauth.reddit.com{path}")
            )

        assert sleep.delays == []
        assert len(sent) == 3

    @pytest.mark.asyncio
    async def test_huge_reset_is_capped(self, clock, sleep, events):
        inner, _ = recording_transport(
            events,
            rate_limited(200, "0", "1e20"),
            rate_limited(200, "100", "60"),
        )
        transport = RateLimitingTransport(inner, clock=clock, sleep=sleep)

        await transport.handle_async_request(httpx.Request("GET", "https://oauth.reddit.com/a"))
        await transport.handle_async_request(httpx.Request("GET", "https://oauth.reddit.com/b"))

        assert sleep.delays == [MAX_RESET_SECONDS]

    @pytest.mark.asyncio
    async def test_negative_reset_on_429_is_bounded(self, clock, sleep, events):
        inner, sent = recording_transport(
            events,
            rate_limited(429, "0", "-5"),
            rate_limited(200, "100", "60"),
        )
        transport = RateLimitingTransport(inner, clock=clock, sleep=sleep, max_retries=3)

        response = await transport.handle_async_request(
            httpx.Request("GET", "https://oauth.reddit.com/a")
        )

        assert response.status_code == 200
        assert sleep.delays == [0.0]
        assert len(sent) == 2

    @pytest.mark.asyncio
    async def test_delay_elapsed_before_next_request(self, clock, sleep, events):
        inner, _ = recording_transport(
            events,
            rate_limited(200, "0", "10"),
            rate_limited(200, "100", "60"),
        )
        transport = RateLimitingTransport(inner, clock=clock, sleep=sleep)

        await transport.handle_async_request(httpx.Request("GET", "https://oauth.reddit.com/a"))
        clock.advance(11)
        await transport.handle_async_request(httpx.Request("GET", "https://oauth.reddit.com/b"))

        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_max_retries_raises(self, clock, sleep, events):
        inner, sent = recording_transport(
            events,
            rate_limited(429, "0", "10"),
            rate_limited(429, "0", "10"),
            rate_limited(429, "0", "10"),
        )
        transport = RateLimitingTransport(inner, clock=clock, sleep=sleep, max_retries=2)

        with pytest.raises(RateLimitExceededError) as exc_info:
            await transport.handle_async_request(
                httpx.Request("GET", "https://oauth.reddit.com/test1")
            )

        assert exc_info.value.retries == 2
        assert len(sent) == 3
        assert sleep.delays == [10, 10]

    @pytest.mark.asyncio
    async def test_cancellation_during_retry_delay_stops_retries(self, clock, events):
        inner, sent = recording_transport(events, rate_limited(429, "0", "3600"))
        transport = RateLimitingTransport(inner, clock=clock)

        task = asyncio.create_task(
            transport.handle_async_request(httpx.Request("GET", "https://oauth.reddit.com/a"))
        )
        await asyncio.sleep(0.01)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert len(sent) == 1
