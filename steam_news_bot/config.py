"""Configuration management for Steam News Telegram Bot."""

import math
import os
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError

DEFAULT_FEED_URL = (
    "https://store.steampowered.com/events/ajaxgetpartnereventspageable/"
    "?clan_accountid=0&appid=570&offset=0&count=100&l=english"
    "&origin=https:%2F%2Fwww.dota2.com"
)
DEFAULT_NEWS_URL = "https://www.dota2.com/news?l=english"
DEFAULT_SLEEP_DURATION_SECS = 5
DEFAULT_PREAMBLE_TEXT = "To see more updates and news follow this"


@dataclass
class TelegramConfig:
    """Configuration for Telegram Bot API."""

    bot_token: str
    chat_id: str
    parse_mode: str = "MarkdownV2"
    retry_attempts: int = 3
    backoff_factor: float = 2.0
    timeout: int = 30
    max_message_length: int = 4000


@dataclass
class PollerConfig:
    """Configuration for the polling loop."""

    feed_url: str = DEFAULT_FEED_URL
    interval_seconds: float = DEFAULT_SLEEP_DURATION_SECS
    news_url: str = DEFAULT_NEWS_URL
    preamble_text: str = DEFAULT_PREAMBLE_TEXT


@dataclass
class SnapshotConfig:
    """Location of the persisted headline snapshot."""

    directory: Path = Path(".")
    name: str = "headlines"


class Config:
    """Main configuration manager."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.feed_url = os.getenv("FEED_URL", DEFAULT_FEED_URL)
        self.news_url = os.getenv("NEWS_URL", DEFAULT_NEWS_URL)
        self.preamble_text = os.getenv("PREAMBLE_TEXT", DEFAULT_PREAMBLE_TEXT)
        self.sleep_duration_secs = self._parse_interval(
            os.getenv("SLEEP_DURATION_SECS")
        )
        self.bot_token = os.getenv("TELEGRAM_BOT_TOKEN") or os.getenv(
            "TELOXIDE_TOKEN", ""
        )
        self.telegram_secret_name = os.getenv("TELEGRAM_SECRET_NAME", "")
        self.chat_id = os.getenv("TELEGRAM_CHAT_ID", "")
        self.aws_region = os.getenv(
            "CURRENT_AWS_REGION", os.getenv("AWS_DEFAULT_REGION", "us-east-1")
        )
        self.snapshot_dir = Path(os.getenv("SNAPSHOT_DIR", "."))
        self.snapshot_name = os.getenv("SNAPSHOT_NAME", "headlines")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

    @staticmethod
    def _parse_interval(raw: str | None) -> float:
        """Parse the poll interval, falling back to the default on bad input."""
        if raw is None:
            return DEFAULT_SLEEP_DURATION_SECS
        try:
            value = float(raw)
        except ValueError:
            return DEFAULT_SLEEP_DURATION_SECS
        if not math.isfinite(value) or value <= 0:
            return DEFAULT_SLEEP_DURATION_SECS
        return value

    def validate(self) -> None:
        """Check the settings that have no usable default.

        Raises:
            ConfigError: If the chat ID is missing, or neither a token nor a
                secret name to fetch one from is configured
        """
        if not self.chat_id.strip():
            raise ConfigError("TELEGRAM_CHAT_ID must be set")
        if not self.bot_token.strip() and not self.telegram_secret_name.strip():
            raise ConfigError(
                "Either TELEGRAM_BOT_TOKEN or TELEGRAM_SECRET_NAME must be set"
            )

    def get_telegram_config(self, bot_token: str | None = None) -> TelegramConfig:
        """Get Telegram configuration.

        Args:
            bot_token: Token resolved at runtime (e.g. from Secrets Manager);
                defaults to the token read from the environment
        """
        return TelegramConfig(
            bot_token=bot_token if bot_token is not None else self.bot_token,
            chat_id=self.chat_id,
        )

    def get_poller_config(self) -> PollerConfig:
        """Get polling loop configuration."""
        return PollerConfig(
            feed_url=self.feed_url,
            interval_seconds=self.sleep_duration_secs,
            news_url=self.news_url,
            preamble_text=self.preamble_text,
        )

    def get_snapshot_config(self) -> SnapshotConfig:
        """Get snapshot storage configuration."""
        return SnapshotConfig(directory=self.snapshot_dir, name=self.snapshot_name)
