"""Steam News Telegram Bot: polls a Steam events feed and relays updates to Telegram."""

__version__ = "1.0.0"
