"""Data models for Steam News Telegram Bot."""

from dataclasses import dataclass, field
from enum import Enum

from .errors import DeliveryError


@dataclass
class Event:
    """Represents a single entry of the Steam events feed."""

    headline: str
    body: str | None = None
    gid: str | None = None


@dataclass(frozen=True)
class FeedSnapshot:
    """Ordered headlines observed in one poll cycle."""

    headlines: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_headlines(cls, headlines) -> "FeedSnapshot":
        return cls(tuple(headlines))

    def to_list(self) -> list[str]:
        return list(self.headlines)

    def __len__(self) -> int:
        return len(self.headlines)


@dataclass
class DispatchResult:
    """Outcome of delivering one message as a sequence of chunks."""

    sent_count: int
    total_chunks: int
    error: DeliveryError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class CycleOutcome(str, Enum):
    """How a single poll cycle ended."""

    FETCH_FAILED = "fetch_failed"
    BASELINE = "baseline"
    UNCHANGED = "unchanged"
    NOTHING_TO_SEND = "nothing_to_send"
    DELIVERED = "delivered"
    DELIVERY_FAILED = "delivery_failed"
