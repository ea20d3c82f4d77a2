"""Steam events feed retrieval and normalization."""

from typing import Any
from urllib.parse import urlparse

import requests

from .errors import FetchError, ParseError
from .logging_config import create_execution_logger
from .models import Event, FeedSnapshot


class FeedSource:
    """Fetches the Steam partner-events JSON document and normalizes it."""

    def __init__(self, timeout: int = 30, execution_id: str | None = None):
        """Initialize FeedSource with configuration.

        Args:
            timeout: HTTP request timeout in seconds
            execution_id: Execution ID for logging context
        """
        self.timeout = timeout
        self.logger = create_execution_logger("feed_source", execution_id)
        self.session = requests.Session()
        self.session.headers.update(
            {"User-Agent": "Steam-News-Telegram-Bot/1.0", "Accept": "application/json"}
        )

        self.logger.info("FeedSource initialized", timeout=timeout)

    def fetch(self, feed_url: str) -> dict[str, Any]:
        """Download the feed and decode it as JSON.

        Args:
            feed_url: URL of the events endpoint

        Returns:
            The decoded JSON object

        Raises:
            FetchError: If the URL is not HTTPS or the download fails
            ParseError: If the response is not a JSON object
        """
        parsed_url = urlparse(feed_url)
        if parsed_url.scheme != "https":
            error_msg = f"Feed URL must use HTTPS protocol: {feed_url}"
            self.logger.error(error_msg, feed_url=feed_url, scheme=parsed_url.scheme)
            raise FetchError(error_msg)

        try:
            self.logger.info("Downloading feed content", feed_url=feed_url)
            response = self.session.get(feed_url, timeout=self.timeout)
            response.raise_for_status()
            self.logger.info(
                "Feed downloaded successfully",
                feed_url=feed_url,
                status_code=response.status_code,
                content_length=len(response.content),
            )
        except requests.RequestException as e:
            self.logger.error(
                f"Failed to download feed {feed_url}: {e}",
                feed_url=feed_url,
                error=str(e),
            )
            raise FetchError(f"Failed to download feed {feed_url}: {e}") from e

        try:
            document = response.json()
        except ValueError as e:
            self.logger.error(
                f"Feed response is not valid JSON: {e}", feed_url=feed_url, error=str(e)
            )
            raise ParseError(f"Feed response is not valid JSON: {e}") from e

        if not isinstance(document, dict):
            error_msg = f"Expected a JSON object, got {type(document).__name__}"
            self.logger.error(error_msg, feed_url=feed_url)
            raise ParseError(error_msg)

        return document

    def parse_events(self, document: dict[str, Any]) -> list[Event]:
        """Extract events from a feed document.

        Missing fields degrade instead of failing: a missing or non-array
        ``events`` field yields no events, a missing headline becomes an
        empty string and a non-string body becomes ``None``.

        Args:
            document: Decoded feed JSON

        Returns:
            Events in feed order (most recent first)
        """
        raw_events = document.get("events")
        if not isinstance(raw_events, list):
            self.logger.warning(
                "Feed document has no events array", events_type=type(raw_events).__name__
            )
            return []

        events = []
        for raw_event in raw_events:
            events.append(self.normalize_event(raw_event))

        return events

    def normalize_event(self, raw_event: Any) -> Event:
        """Normalize one raw event object into an Event."""
        if not isinstance(raw_event, dict):
            return Event(headline="")

        announcement = raw_event.get("announcement_body")
        if not isinstance(announcement, dict):
            announcement = {}

        headline = announcement.get("headline")
        if not isinstance(headline, str):
            headline = ""

        body = announcement.get("body")
        if not isinstance(body, str):
            body = None

        gid = raw_event.get("gid")

        return Event(
            headline=headline,
            body=body,
            gid=str(gid) if gid is not None else None,
        )

    @staticmethod
    def build_snapshot(events: list[Event]) -> FeedSnapshot:
        """Build the comparison snapshot from the events' headlines."""
        return FeedSnapshot.from_headlines(event.headline for event in events)
