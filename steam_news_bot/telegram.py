"""Telegram message sink for Steam News Telegram Bot."""

import http.client
import json
import time
import urllib.error
import urllib.request

from .config import TelegramConfig
from .errors import DeliveryError
from .logging_config import create_execution_logger


class TelegramSink:
    """Delivers formatted texts through the Telegram Bot API."""

    def __init__(self, config: TelegramConfig, execution_id: str | None = None):
        """Initialize Telegram sink with configuration."""
        self.config = config
        self.logger = create_execution_logger("telegram_sink", execution_id)
        self.base_url = f"https://api.telegram.org/bot{config.bot_token}"

        self.logger.info(
            "TelegramSink initialized",
            chat_id=config.chat_id,
            parse_mode=config.parse_mode,
            retry_attempts=config.retry_attempts,
        )

    def send(
        self, destination_id: str, text: str, parse_mode: str | None = None
    ) -> None:
        """
        Send one message to a Telegram chat.

        Rate limiting (HTTP 429) is retried with exponential backoff; any
        other failure is reported immediately.

        Args:
            destination_id: Target chat ID
            text: Message text, at most ``max_message_length`` characters
            parse_mode: Telegram parse mode, defaults to the configured one

        Raises:
            DeliveryError: If the message could not be delivered
        """
        if len(text) > self.config.max_message_length:
            raise DeliveryError(
                f"Message of {len(text)} characters exceeds the "
                f"{self.config.max_message_length} character limit"
            )

        url = f"{self.base_url}/sendMessage"
        data = {
            "chat_id": destination_id,
            "text": text,
            "parse_mode": parse_mode or self.config.parse_mode,
            "disable_web_page_preview": False,
        }

        for attempt in range(self.config.retry_attempts):
            try:
                self.logger.debug(
                    f"Sending message to Telegram API (attempt {attempt + 1})",
                    attempt=attempt + 1,
                    message_length=len(text),
                )

                req = urllib.request.Request(
                    url,
                    data=json.dumps(data).encode("utf-8"),
                    headers={
                        "Content-Type": "application/json",
                        "User-Agent": "Steam-News-Telegram-Bot/1.0",
                    },
                )

                with urllib.request.urlopen(req, timeout=self.config.timeout) as response:
                    if response.status == 200:
                        self.logger.info(
                            "Message sent successfully to Telegram",
                            status_code=response.status,
                        )
                        return
                    self.logger.error(
                        f"Telegram API returned status {response.status}",
                        status_code=response.status,
                    )
                    raise DeliveryError(
                        f"Telegram API returned status {response.status}",
                        status_code=response.status,
                    )

            except urllib.error.HTTPError as e:
                if e.code == 429:
                    self.logger.warning(
                        f"Rate limited by Telegram API (attempt {attempt + 1})",
                        attempt=attempt + 1,
                        http_code=e.code,
                    )
                    if attempt < self.config.retry_attempts - 1:
                        self.handle_rate_limit(attempt)
                        continue
                    self.logger.error("Max retry attempts reached for rate limiting")
                    raise DeliveryError(
                        "Max retry attempts reached for rate limiting", status_code=429
                    ) from e

                self.logger.error(
                    f"HTTP error sending message: {e.code} - {e.reason}",
                    http_code=e.code,
                    http_reason=str(e.reason),
                )
                raise DeliveryError(
                    f"HTTP error sending message: {e.code} - {e.reason}",
                    status_code=e.code,
                ) from e

            except urllib.error.URLError as e:
                self.logger.error(
                    f"URL error sending message: {e.reason}", error_reason=str(e.reason)
                )
                raise DeliveryError(f"URL error sending message: {e.reason}") from e

            except http.client.HTTPException as e:
                self.logger.error(f"Protocol error sending message: {e!r}", error=repr(e))
                raise DeliveryError(f"Protocol error sending message: {e!r}") from e

            except OSError as e:
                self.logger.error(f"Network error sending message: {e}", error=str(e))
                raise DeliveryError(f"Network error sending message: {e}") from e

        raise DeliveryError("Message was not sent")

    def handle_rate_limit(self, retry_count: int) -> None:
        """
        Handle rate limiting with exponential backoff.

        Args:
            retry_count: Current retry attempt number
        """
        backoff_time = self.config.backoff_factor**retry_count
        self.logger.warning(
            f"Rate limited, waiting {backoff_time} seconds before retry {retry_count + 1}",
            retry_count=retry_count,
            backoff_time=backoff_time,
        )
        time.sleep(backoff_time)
