"""Chunked, in-order delivery of long messages."""

from typing import Protocol

from .errors import DeliveryError
from .logging_config import create_execution_logger
from .models import DispatchResult

MAX_MESSAGE_LENGTH = 4000


class MessageSink(Protocol):
    """Anything that can deliver one formatted text to a destination."""

    def send(self, destination_id: str, text: str, parse_mode: str = "MarkdownV2") -> None:
        ...


def split_message(message: str, max_len: int = MAX_MESSAGE_LENGTH) -> list[str]:
    """Split ``message`` into consecutive slices of at most ``max_len`` characters.

    An empty message yields no chunks.
    """
    if max_len < 1:
        raise ValueError(f"max_len must be positive, got {max_len}")
    return [message[i : i + max_len] for i in range(0, len(message), max_len)]


class ChunkDispatcher:
    """Delivers a message through a sink as ordered, size-bounded chunks."""

    def __init__(
        self,
        sink: MessageSink,
        max_len: int = MAX_MESSAGE_LENGTH,
        parse_mode: str = "MarkdownV2",
        execution_id: str | None = None,
    ):
        if max_len < 1:
            raise ValueError(f"max_len must be positive, got {max_len}")
        self.sink = sink
        self.max_len = max_len
        self.parse_mode = parse_mode
        self.logger = create_execution_logger("dispatcher", execution_id)

    def dispatch(self, message: str, destination_id: str) -> DispatchResult:
        """Send ``message`` chunk by chunk, stopping at the first failure.

        Each chunk is sent only after the previous one was acknowledged.
        Chunks already delivered are not retracted when a later one fails.

        Args:
            message: Fully formatted message
            destination_id: Chat to deliver to

        Returns:
            DispatchResult with the number of delivered chunks and the
            error that stopped delivery, if any
        """
        chunks = split_message(message, self.max_len)
        sent_count = 0

        for index, chunk in enumerate(chunks):
            try:
                self.sink.send(destination_id, chunk, parse_mode=self.parse_mode)
            except DeliveryError as e:
                e.sent_count = sent_count
                self.logger.log_dispatch(sent_count, len(chunks), success=False)
                self.logger.error(
                    f"Chunk {index + 1}/{len(chunks)} failed: {e}",
                    error=str(e),
                    sent_count=sent_count,
                )
                return DispatchResult(sent_count, len(chunks), error=e)

            sent_count += 1
            self.logger.debug(
                f"Chunk {index + 1}/{len(chunks)} sent", chunk_length=len(chunk)
            )

        self.logger.log_dispatch(sent_count, len(chunks))
        return DispatchResult(sent_count, len(chunks))
