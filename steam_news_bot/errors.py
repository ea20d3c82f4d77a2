"""Error types for Steam News Telegram Bot."""


class BotError(Exception):
    """Base class for all bot errors."""


class ConfigError(BotError):
    """Configuration is missing or invalid."""


class FetchError(BotError):
    """The feed could not be retrieved."""


class ParseError(BotError):
    """The feed response is not a usable JSON document."""


class StorageError(BotError):
    """The persisted snapshot could not be read or written."""


class DeliveryError(BotError):
    """A message (or one of its chunks) could not be delivered.

    Args:
        message: Human readable description
        sent_count: Chunks delivered before the failure
        status_code: HTTP status returned by the messaging API, if any
    """

    def __init__(self, message: str, sent_count: int = 0, status_code: int | None = None):
        super().__init__(message)
        self.sent_count = sent_count
        self.status_code = status_code
