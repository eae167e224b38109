"""Channel Mirror: mirrors messages and threads between two Discord channels."""

from channel_mirror.config import MirrorConfig, GuardConfig
from channel_mirror.errors import ConfigError, DeliveryError, MirrorError, PairingConflictError
from channel_mirror.domain import (
    ChannelPair,
    MirrorEngine,
    PairingStore,
    RaceGuard,
    RelayDispatcher,
    ThreadMirrorCreator,
    sanitize_mentions,
)

__all__ = [
    "MirrorConfig",
    "GuardConfig",
    "ConfigError",
    "DeliveryError",
    "MirrorError",
    "PairingConflictError",
    "ChannelPair",
    "MirrorEngine",
    "PairingStore",
    "RaceGuard",
    "RelayDispatcher",
    "ThreadMirrorCreator",
    "sanitize_mentions",
]
