"""Property-based tests for logging functionality."""

import json
import logging
from io import StringIO
from unittest.mock import Mock

from hypothesis import given
from hypothesis import strategies as st

from steam_news_bot.config import PollerConfig
from steam_news_bot.feed import FeedSource
from steam_news_bot.logging_config import StructuredFormatter, create_execution_logger
from steam_news_bot.poller import Poller


def _capture(logger_name: str = "steam_news_bot"):
    log_capture = StringIO()
    handler = logging.StreamHandler(log_capture)
    handler.setFormatter(StructuredFormatter())
    logger = logging.getLogger(logger_name)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    return logger, handler, log_capture


class TestLoggingProperties:
    """Property-based tests for structured logging."""

    @given(
        component=st.sampled_from(["poller", "feed_source", "dispatcher", "snapshot_store"]),
        message=st.text(min_size=1, max_size=100),
        headline=st.text(max_size=50),
    )
    def test_every_record_is_one_json_object(self, component, message, headline):
        """For any message and context, each log line parses as JSON with the context."""
        logger, handler, log_capture = _capture()
        try:
            exec_logger = create_execution_logger(component, "exec-1")
            exec_logger.info(message, headline=headline, status_code=200)
        finally:
            logger.removeHandler(handler)

        lines = [line for line in log_capture.getvalue().splitlines() if line]
        assert len(lines) == 1
        entry = json.loads(lines[0])
        assert entry["message"] == message
        assert entry["level"] == "INFO"
        assert entry["logger"] == f"steam_news_bot.{component}"
        assert entry["execution_id"] == "exec-1"
        assert entry["component"] == component
        assert entry["headline"] == headline
        assert entry["context"]["status_code"] == 200

    def test_cycle_logs_start_and_end_with_outcome(self, tmp_path):
        logger, handler, log_capture = _capture()
        try:
            feed_source = FeedSource()
            feed_source.fetch = Mock(return_value={"events": []})
            snapshot_store = Mock()
            snapshot_store.load.return_value = None
            poller = Poller(
                config=PollerConfig(),
                feed_source=feed_source,
                snapshot_store=snapshot_store,
                dispatcher=Mock(),
                destination_id="chat",
            )
            poller.run_cycle()
        finally:
            logger.removeHandler(handler)

        entries = [json.loads(line) for line in log_capture.getvalue().splitlines() if line]
        messages = [entry["message"] for entry in entries]
        assert "Starting poller execution" in messages
        assert "Completed poller execution" in messages
        end = next(e for e in entries if e["message"] == "Completed poller execution")
        assert end["outcome"] == "baseline"

    def test_exception_traceback_is_included(self):
        logger, handler, log_capture = _capture()
        try:
            exec_logger = create_execution_logger("poller", "exec-2")
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                exec_logger.exception("Unexpected error in poll cycle")
        finally:
            logger.removeHandler(handler)

        entry = json.loads(log_capture.getvalue().splitlines()[0])
        assert "RuntimeError: boom" in entry["exception"]
