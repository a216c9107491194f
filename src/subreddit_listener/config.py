"""Configuration management for Subreddit Listener."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from subreddit_listener.exceptions import ConfigurationError

APPLICATION_VERSION = "v0.0.1"


@dataclass
class Config:
    """Application configuration."""

    subreddit_name: str = ""
    reddit_username: str = ""
    reddit_password: str = ""
    reddit_app_client_id: str = ""
    reddit_app_client_secret: str = ""
    application_name: str = "subreddit-listener"
    reddit_api_base_address: str = "https://oauth.reddit.com"
    reddit_api_authorization_url: str = "https://www.reddit.com/api/v1/access_token"

    # Unix seconds; posts created before this are ignored. None means "now".
    application_start_time: int | None = None

    # Timeouts
    request_timeout: float = 30.0

    # Polling
    poll_interval: float = 60.0

    # None keeps retrying 429 responses for as long as the server sends them
    rate_limit_max_retries: int | None = None

    application_version: str = APPLICATION_VERSION

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        # override=False ensures environment variables take precedence over .env
        load_dotenv(override=False)

        return cls(
            subreddit_name=os.getenv("SUBREDDIT_NAME", ""),
            reddit_username=os.getenv("REDDIT_USERNAME", ""),
            reddit_password=os.getenv("REDDIT_PASSWORD", ""),
            reddit_app_client_id=os.getenv("REDDIT_APP_CLIENT_ID", ""),
            reddit_app_client_secret=os.getenv("REDDIT_APP_CLIENT_SECRET", ""),
            application_name=os.getenv("APPLICATION_NAME", "subreddit-listener"),
            reddit_api_base_address=os.getenv(
                "REDDIT_API_BASE_ADDRESS", "https://oauth.reddit.com"
            ),
            reddit_api_authorization_url=os.getenv(
                "REDDIT_API_AUTHORIZATION_URL",
                "https://www.reddit.com/api/v1/access_token",
            ),
            application_start_time=_int_from_env("APPLICATION_START_TIME"),
            request_timeout=_float_from_env("REQUEST_TIMEOUT", 30.0),
            poll_interval=_float_from_env("POLL_INTERVAL_SECONDS", 60.0),
            rate_limit_max_retries=_int_from_env("RATE_LIMIT_MAX_RETRIES"),
        )

    @property
    def user_agent(self) -> str:
        """User-Agent required by the Reddit API usage policy."""
        return f"{self.application_name}/{self.application_version} by {self.reddit_username}"

    @property
    def missing_settings(self) -> list[str]:
        """Names of required settings that have not been provided."""
        required = {
            "SUBREDDIT_NAME": self.subreddit_name,
            "REDDIT_USERNAME": self.reddit_username,
            "REDDIT_PASSWORD": self.reddit_password,
            "REDDIT_APP_CLIENT_ID": self.reddit_app_client_id,
            "REDDIT_APP_CLIENT_SECRET": self.reddit_app_client_secret,
        }
        return [name for name, value in required.items() if not value]

    @property
    def is_configured(self) -> bool:
        """Check if every required setting is present."""
        return not self.missing_settings


def _int_from_env(name: str) -> int | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


def _float_from_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None


# Global config instance
_config: Config | None = None


def get_config() -> Config:
    """Get or create the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def set_config(config: Config | None) -> None:
    """Set the global configuration instance (useful for testing)."""
    global _config
    _config = config
