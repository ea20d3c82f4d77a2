"""Unit tests for the Steam events feed source."""

from unittest.mock import Mock

import pytest
import requests

from steam_news_bot.errors import FetchError, ParseError
from steam_news_bot.feed import FeedSource
from steam_news_bot.models import Event, FeedSnapshot

FEED_URL = "https://store.steampowered.com/events/ajaxgetpartnereventspageable/?appid=570"


def _response(payload=None, status_code=200, json_error=None):
    response = Mock()
    response.status_code = status_code
    response.content = b"{}"
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Error")
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = payload
    return response


class TestFeedSourceUnit:
    """Unit tests for FeedSource."""

    def setup_method(self):
        """Set up a feed source with a mocked HTTP session."""
        self.source = FeedSource()
        self.source.session = Mock()

    def test_fetch_returns_document(self):
        document = {"events": []}
        self.source.session.get.return_value = _response(document)

        assert self.source.fetch(FEED_URL) == document
        self.source.session.get.assert_called_once_with(FEED_URL, timeout=30)

    def test_fetch_rejects_non_https(self):
        with pytest.raises(FetchError, match="HTTPS"):
            self.source.fetch("http://store.steampowered.com/events")

        self.source.session.get.assert_not_called()

    def test_fetch_network_error(self):
        self.source.session.get.side_effect = requests.ConnectionError("unreachable")

        with pytest.raises(FetchError):
            self.source.fetch(FEED_URL)

    def test_fetch_http_error(self):
        self.source.session.get.return_value = _response(status_code=503)

        with pytest.raises(FetchError):
            self.source.fetch(FEED_URL)

    def test_fetch_invalid_json(self):
        self.source.session.get.return_value = _response(
            json_error=ValueError("Expecting value")
        )

        with pytest.raises(ParseError):
            self.source.fetch(FEED_URL)

    def test_fetch_non_object_json(self):
        self.source.session.get.return_value = _response(["not", "an", "object"])

        with pytest.raises(ParseError):
            self.source.fetch(FEED_URL)

    def test_parse_events(self):
        document = {
            "events": [
                {
                    "gid": "5271398453212",
                    "announcement_body": {
                        "headline": "Gameplay Patch 7.35d",
                        "body": "[h1]Changes[/h1]",
                    },
                },
                {
                    "announcement_body": {
                        "headline": "Dota 2 Update 3/28/2024",
                        "body": "Fixed a crash.",
                    }
                },
            ]
        }

        events = self.source.parse_events(document)

        assert events == [
            Event(headline="Gameplay Patch 7.35d", body="[h1]Changes[/h1]", gid="5271398453212"),
            Event(headline="Dota 2 Update 3/28/2024", body="Fixed a crash."),
        ]

    def test_parse_events_missing_array_degrades_to_empty(self):
        assert self.source.parse_events({}) == []
        assert self.source.parse_events({"events": "nope"}) == []

    def test_parse_events_missing_fields_degrade(self):
        document = {
            "events": [
                {"announcement_body": {"body": None}},
                {"announcement_body": {"headline": "Only headline"}},
                {"announcement_body": {"headline": 42, "body": {"rich": True}}},
                "garbage",
                {},
            ]
        }

        events = self.source.parse_events(document)

        assert [e.headline for e in events] == ["", "Only headline", "", "", ""]
        assert all(e.body is None for e in events)

    def test_build_snapshot_keeps_order(self):
        events = [Event(headline="b"), Event(headline="a")]

        snapshot = FeedSource.build_snapshot(events)

        assert snapshot == FeedSnapshot(("b", "a"))
        assert snapshot != FeedSnapshot(("a", "b"))
