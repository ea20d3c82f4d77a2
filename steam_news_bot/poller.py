"""Polling loop that ties change detection, transcoding and delivery together."""

import threading
from datetime import UTC, datetime
from enum import Enum

from .config import DEFAULT_NEWS_URL, DEFAULT_PREAMBLE_TEXT, PollerConfig
from .differ import has_changed
from .dispatcher import ChunkDispatcher
from .errors import FetchError, ParseError, StorageError
from .feed import FeedSource
from .logging_config import create_execution_logger
from .models import CycleOutcome, Event, FeedSnapshot
from .snapshot import FileSnapshotStore
from .transcoder import escape_markdown, transcode


class PollerState(str, Enum):
    """Phases of a poll cycle."""

    IDLE = "idle"
    FETCHING = "fetching"
    COMPARING = "comparing"
    UNCHANGED = "unchanged"
    UPDATING = "updating"
    TRANSCODING = "transcoding"
    DISPATCHING = "dispatching"
    SLEEPING = "sleeping"


def compose_message(
    event: Event,
    news_url: str = DEFAULT_NEWS_URL,
    preamble_text: str = DEFAULT_PREAMBLE_TEXT,
) -> str:
    """Build the MarkdownV2 announcement for ``event``.

    The preamble (``preamble_text`` followed by a link to the news page) comes
    first, then the bold headline and the transcoded body. An event without a
    body yields a headline-only message.
    """
    preamble = f"_*{escape_markdown(preamble_text)} [link]({news_url})*_"
    message = f"{preamble}\n\n*{escape_markdown(event.headline)}*\n"
    if event.body is not None:
        message += f"{transcode(event.body)}\n\n"
    return message


class Poller:
    """Runs poll cycles on a fixed interval, one cycle at a time."""

    def __init__(
        self,
        config: PollerConfig,
        feed_source: FeedSource,
        snapshot_store: FileSnapshotStore,
        dispatcher: ChunkDispatcher,
        destination_id: str,
        execution_id: str | None = None,
    ):
        self.config = config
        self.feed_source = feed_source
        self.snapshot_store = snapshot_store
        self.dispatcher = dispatcher
        self.destination_id = destination_id
        self.logger = create_execution_logger("poller", execution_id)
        self.state = PollerState.IDLE
        self._cycle_lock = threading.Lock()

    def _transition(self, state: PollerState) -> None:
        self.logger.debug(f"State {self.state.value} -> {state.value}")
        self.state = state

    def run(self, stop_event: threading.Event) -> None:
        """Poll until ``stop_event`` is set.

        Setting the event cuts the interval sleep short; a cycle already in
        progress runs to completion first.
        """
        self.logger.log_execution_start(
            feed_url=self.config.feed_url,
            interval_seconds=self.config.interval_seconds,
        )
        cycles = 0

        while not stop_event.is_set():
            try:
                self.run_cycle()
            except Exception as e:
                # Nothing inside a cycle may end the loop
                self.logger.exception(f"Unexpected error in poll cycle: {e}", error=str(e))
            cycles += 1

            self._transition(PollerState.SLEEPING)
            stop_event.wait(self.config.interval_seconds)

        self.logger.log_execution_end(success=True, cycles=cycles)

    def run_cycle(self) -> CycleOutcome:
        """Run one cycle from fetching to dispatching.

        Returns:
            How the cycle ended
        """
        with self._cycle_lock:
            cycle_logger = create_execution_logger(
                "poller", f"cycle_{datetime.now(UTC).strftime('%Y%m%d_%H%M%S_%f')}"
            )
            cycle_logger.log_execution_start(feed_url=self.config.feed_url)

            outcome = self._run_cycle()

            cycle_logger.log_execution_end(
                success=outcome
                not in (CycleOutcome.FETCH_FAILED, CycleOutcome.DELIVERY_FAILED),
                outcome=outcome.value,
            )
            return outcome

    def _run_cycle(self) -> CycleOutcome:
        self._transition(PollerState.FETCHING)
        try:
            document = self.feed_source.fetch(self.config.feed_url)
        except (FetchError, ParseError) as e:
            self.logger.error(
                f"Cycle abandoned, feed unavailable: {e}",
                feed_url=self.config.feed_url,
                error=str(e),
            )
            return CycleOutcome.FETCH_FAILED

        events = self.feed_source.parse_events(document)
        self.logger.log_feed_fetched(self.config.feed_url, len(events))

        self._transition(PollerState.COMPARING)
        current = self.feed_source.build_snapshot(events)
        previous = self._load_previous()

        if previous is None:
            self.logger.info(
                "No baseline snapshot, recording current headlines without notifying",
                headlines_count=len(current),
            )
            self._store(current)
            return CycleOutcome.BASELINE

        if not has_changed(previous, current):
            self._transition(PollerState.UNCHANGED)
            self.logger.info("Headlines unchanged, nothing new")
            return CycleOutcome.UNCHANGED

        self.logger.info(
            "Headlines changed",
            previous_count=len(previous),
            current_count=len(current),
        )

        self._transition(PollerState.UPDATING)
        self._store(current)

        self._transition(PollerState.TRANSCODING)
        if not events:
            self.logger.warning("Feed changed but holds no events to announce")
            return CycleOutcome.NOTHING_TO_SEND

        latest = events[0]
        message = compose_message(
            latest, self.config.news_url, self.config.preamble_text
        )
        self.logger.info(
            "Prepared message for sending",
            headline=latest.headline,
            gid=latest.gid,
            message_length=len(message),
        )

        self._transition(PollerState.DISPATCHING)
        result = self.dispatcher.dispatch(message, self.destination_id)
        if not result.ok:
            self.logger.error(
                f"Delivery failed after {result.sent_count} of {result.total_chunks} chunks: "
                f"{result.error}",
                headline=latest.headline,
                sent_count=result.sent_count,
                total_chunks=result.total_chunks,
            )
            return CycleOutcome.DELIVERY_FAILED

        self.logger.info(
            "Update delivered",
            headline=latest.headline,
            total_chunks=result.total_chunks,
        )
        return CycleOutcome.DELIVERED

    def _load_previous(self) -> FeedSnapshot | None:
        try:
            return self.snapshot_store.load()
        except StorageError as e:
            self.logger.warning(
                f"Stored snapshot unreadable, treating as no baseline: {e}", error=str(e)
            )
            return None

    def _store(self, snapshot: FeedSnapshot) -> bool:
        try:
            self.snapshot_store.store(snapshot)
        except StorageError as e:
            # Delivery still goes ahead; the next cycle may see the change again
            self.logger.error(f"Failed to persist snapshot: {e}", error=str(e))
            return False
        return True
