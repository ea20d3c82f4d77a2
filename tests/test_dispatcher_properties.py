"""Property-based tests for chunked message delivery."""

from unittest.mock import Mock

from hypothesis import given
from hypothesis import strategies as st

from steam_news_bot.dispatcher import ChunkDispatcher, split_message
from steam_news_bot.errors import DeliveryError


class TestChunkDispatcherProperties:
    """Property-based tests for split_message and ChunkDispatcher."""

    @given(st.text(max_size=3000), st.integers(min_value=1, max_value=500))
    def test_split_is_lossless_and_bounded(self, message, max_len):
        chunks = split_message(message, max_len)

        assert "".join(chunks) == message
        assert all(0 < len(chunk) <= max_len for chunk in chunks)
        # Every chunk but the last is full
        assert all(len(chunk) == max_len for chunk in chunks[:-1])
        assert len(chunks) == -(-len(message) // max_len)

    @given(st.text(max_size=2000), st.integers(min_value=1, max_value=300))
    def test_dispatched_chunks_reassemble_message(self, message, max_len):
        sink = Mock()
        dispatcher = ChunkDispatcher(sink, max_len=max_len)

        result = dispatcher.dispatch(message, "chat")

        sent = [c.args[1] for c in sink.send.call_args_list]
        assert "".join(sent) == message
        assert result.sent_count == len(sent)

    @given(
        st.integers(min_value=1, max_value=20),
        st.data(),
    )
    def test_partial_failure_reports_sent_count(self, total_chunks, data):
        fail_at = data.draw(st.integers(min_value=0, max_value=total_chunks - 1))
        outcomes = [None] * fail_at + [DeliveryError("boom")]
        sink = Mock()
        sink.send.side_effect = outcomes
        dispatcher = ChunkDispatcher(sink, max_len=10)

        result = dispatcher.dispatch("y" * (10 * total_chunks), "chat")

        assert result.sent_count == fail_at
        assert result.total_chunks == total_chunks
        assert sink.send.call_count == fail_at + 1
        assert result.error.sent_count == fail_at
