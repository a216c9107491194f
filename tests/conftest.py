"""Pytest configuration and fixtures."""

import pytest

from subreddit_listener.config import Config, set_config
from tests.fakes import AUTH_URL, BASE_URL, FakeClock, RecordingSleep


@pytest.fixture(autouse=True)
def reset_globals():
    """Reset global state before each test."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def test_config():
    """Create a test configuration."""
    config = Config(
        subreddit_name="python",
        reddit_username="F",
        reddit_password="E",
        reddit_app_client_id="C",
        reddit_app_client_secret="D",
        application_name="A",
        reddit_api_base_address=BASE_URL,
        reddit_api_authorization_url=AUTH_URL,
        application_start_time=0,
    )
    set_config(config)
    return config


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def events():
    """Ordered log of sends and delays shared by fakes in a test."""
    return []


@pytest.fixture
def sleep(events):
    return RecordingSleep(events)
