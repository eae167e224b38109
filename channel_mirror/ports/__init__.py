"""Port interfaces (Hexagonal Architecture)."""

from channel_mirror.ports.inbound import (
    AuthorInfo,
    IncomingMessage,
    IncomingThread,
    MessagePosted,
    MirrorEvent,
    ThreadCreated,
)
from channel_mirror.ports.outbound import DeliveryPort, RecordStorePort, RelayPayload, ThreadPort

__all__ = [
    "AuthorInfo",
    "IncomingMessage",
    "IncomingThread",
    "MessagePosted",
    "MirrorEvent",
    "ThreadCreated",
    "DeliveryPort",
    "RecordStorePort",
    "RelayPayload",
    "ThreadPort",
]
