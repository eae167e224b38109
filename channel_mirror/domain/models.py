"""Domain data models: pure Python dataclasses."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass(frozen=True)
class ChannelPair:
    """The two channels that mirror each other."""

    first: int
    second: int

    def __post_init__(self):
        if self.first == self.second:
            raise ValueError("a channel cannot be paired with itself")

    def contains(self, channel_id: Optional[int]) -> bool:
        return channel_id in (self.first, self.second)

    def partner_of(self, channel_id: Optional[int]) -> Optional[int]:
        if channel_id == self.first:
            return self.second
        if channel_id == self.second:
            return self.first
        return None


@dataclass(frozen=True)
class ThreadPairing:
    """Durable symmetric link between a thread and its mirror."""

    thread_a: int
    thread_b: int
    created_at: str  # ISO datetime (UTC)

    @classmethod
    def new(cls, thread_a: int, thread_b: int) -> "ThreadPairing":
        return cls(thread_a, thread_b, datetime.now(timezone.utc).isoformat())

    @property
    def record_name(self) -> str:
        return f"{self.thread_a}_{self.thread_b}"

    def partner_of(self, thread_id: int) -> Optional[int]:
        if thread_id == self.thread_a:
            return self.thread_b
        if thread_id == self.thread_b:
            return self.thread_a
        return None

    def to_record(self) -> dict:
        # Snowflakes as strings so other JSON readers keep full precision
        return {
            "threadA": str(self.thread_a),
            "threadB": str(self.thread_b),
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, record: dict) -> "ThreadPairing":
        """Parse a stored record. Raises ValueError/KeyError/TypeError if malformed."""
        thread_a = int(record["threadA"])
        thread_b = int(record["threadB"])
        if thread_a == thread_b:
            raise ValueError(f"thread {thread_a} paired with itself")
        return cls(thread_a, thread_b, str(record.get("createdAt", "")))


@dataclass(frozen=True)
class Destination:
    """Where a relayed message goes: a channel webhook, optionally into a thread."""

    channel_id: int
    thread_id: Optional[int] = None
