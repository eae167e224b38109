"""Outbound ports: interfaces for external system adapters."""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Protocol, runtime_checkable

from channel_mirror.ports.inbound import IncomingMessage


@dataclass
class RelayPayload:
    """One webhook delivery: where to post, as whom, and what."""

    channel_id: int
    username: str
    thread_id: Optional[int] = None
    avatar_url: Optional[str] = None
    content: Optional[str] = None  # None -> field omitted
    embeds: List[Any] = field(default_factory=list)
    attachment_urls: List[str] = field(default_factory=list)
    suppress_mentions: bool = True


@runtime_checkable
class DeliveryPort(Protocol):
    """Posts relayed messages under an arbitrary display identity."""

    async def deliver(self, payload: RelayPayload) -> None: ...


@runtime_checkable
class ThreadPort(Protocol):
    """Thread management on the chat platform."""

    async def is_text_channel(self, channel_id: int) -> bool: ...

    async def create_thread(
        self,
        parent_id: int,
        name: str,
        private: bool = False,
        auto_archive_duration: int = 1440,
    ) -> int: ...

    async def join_thread(self, thread_id: int) -> None: ...

    async def fetch_first_message(self, thread_id: int) -> Optional[IncomingMessage]: ...


@runtime_checkable
class RecordStorePort(Protocol):
    """Durable store of small named JSON records."""

    def load_all(self) -> List[dict]: ...
    def write(self, name: str, record: dict) -> None: ...
