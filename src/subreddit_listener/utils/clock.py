"""Time seams for the transport chain and paginator."""

from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

Clock = Callable[[], datetime]
Sleep = Callable[[float], Awaitable[None]]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)
