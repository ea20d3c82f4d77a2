"""Unit tests for chunked message delivery."""

from unittest.mock import Mock, call

import pytest

from steam_news_bot.dispatcher import MAX_MESSAGE_LENGTH, ChunkDispatcher, split_message
from steam_news_bot.errors import DeliveryError


class TestChunkDispatcherUnit:
    """Unit tests for ChunkDispatcher and split_message."""

    def setup_method(self):
        """Set up a dispatcher over a mock sink."""
        self.sink = Mock()
        self.dispatcher = ChunkDispatcher(self.sink)

    def test_8500_characters_make_three_chunks(self):
        message = "x" * 8500

        chunks = split_message(message, 4000)

        assert [len(c) for c in chunks] == [4000, 4000, 500]
        assert "".join(chunks) == message

    def test_default_limit_is_4000(self):
        assert MAX_MESSAGE_LENGTH == 4000
        assert self.dispatcher.max_len == 4000

    def test_empty_message_sends_nothing(self):
        result = self.dispatcher.dispatch("", "chat")

        assert result.ok
        assert result.sent_count == 0
        assert result.total_chunks == 0
        self.sink.send.assert_not_called()

    def test_short_message_is_one_chunk(self):
        result = self.dispatcher.dispatch("hello", "chat")

        assert result.ok
        assert result.sent_count == 1
        self.sink.send.assert_called_once_with("chat", "hello", parse_mode="MarkdownV2")

    def test_chunks_sent_in_order(self):
        message = "a" * 4000 + "b" * 4000 + "c" * 500

        result = self.dispatcher.dispatch(message, "chat")

        assert result.ok
        assert result.sent_count == 3
        assert self.sink.send.call_args_list == [
            call("chat", "a" * 4000, parse_mode="MarkdownV2"),
            call("chat", "b" * 4000, parse_mode="MarkdownV2"),
            call("chat", "c" * 500, parse_mode="MarkdownV2"),
        ]

    def test_failure_stops_remaining_chunks(self):
        self.sink.send.side_effect = [None, DeliveryError("HTTP 400"), None]

        result = self.dispatcher.dispatch("x" * 8500, "chat")

        assert not result.ok
        assert result.sent_count == 1
        assert result.total_chunks == 3
        assert isinstance(result.error, DeliveryError)
        assert result.error.sent_count == 1
        assert self.sink.send.call_count == 2

    def test_failure_on_first_chunk(self):
        self.sink.send.side_effect = DeliveryError("network down")

        result = self.dispatcher.dispatch("hi", "chat")

        assert result.sent_count == 0
        assert not result.ok

    def test_split_counts_characters_not_bytes(self):
        message = "🔸" * 5

        assert split_message(message, 2) == ["🔸🔸", "🔸🔸", "🔸"]

    def test_invalid_max_len(self):
        with pytest.raises(ValueError):
            split_message("abc", 0)
        with pytest.raises(ValueError):
            ChunkDispatcher(self.sink, max_len=0)
