"""Domain layer: pure Python, no framework dependencies."""

from channel_mirror.domain.engine import EventBus, MirrorEngine
from channel_mirror.domain.mirror import MirrorOutcome, MirrorState, ThreadMirrorCreator
from channel_mirror.domain.models import ChannelPair, Destination, ThreadPairing
from channel_mirror.domain.pairing import PairingStore
from channel_mirror.domain.race_guard import RaceGuard
from channel_mirror.domain.relay import RelayDispatcher, display_identity
from channel_mirror.domain.sanitizer import sanitize_mentions

__all__ = [
    "EventBus",
    "MirrorEngine",
    "MirrorOutcome",
    "MirrorState",
    "ThreadMirrorCreator",
    "ChannelPair",
    "Destination",
    "ThreadPairing",
    "PairingStore",
    "RaceGuard",
    "RelayDispatcher",
    "display_identity",
    "sanitize_mentions",
]
