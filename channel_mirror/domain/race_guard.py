"""Race guard: keeps the engine from mirroring its own thread creations.

Two layers with different timing:

- processing markers cover overlap inside this process (a second
  notification for a thread we are already mirroring);
- the creation ledger covers the round trip between our create request and
  the platform announcing that thread back to us, which can take seconds;
- relayed ids remember opening messages the creator already copied, so the
  regular message event for them is dropped.

All state lives on the event loop thread, so membership checks need no lock.
They must happen before the awaited call that could race.
"""

import sys
import time
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, Optional, Set, Tuple

from channel_mirror.config import LEDGER_RETENTION_MS, SUPPRESSION_WINDOW_MS, VERBOSE


def _log(msg: str):
    print(msg, file=sys.stderr)


def _debug(msg: str):
    if VERBOSE:
        _log(msg)


def monotonic_ms() -> float:
    return time.monotonic() * 1000


class RaceGuard:
    """Owns ProcessingMarker and CreationLedger state."""

    def __init__(
        self,
        suppression_window_ms: int = SUPPRESSION_WINDOW_MS,
        retention_ms: int = LEDGER_RETENTION_MS,
        clock: Callable[[], float] = monotonic_ms,
    ):
        self._suppression_window_ms = suppression_window_ms
        self._retention_ms = retention_ms
        self._clock = clock
        self._processing: Set[int] = set()
        self._ledger: Dict[Tuple[str, int], float] = {}
        self._relayed: Dict[int, float] = {}

    # -- creation ledger --

    def mark_creating(self, thread_name: str, channel_id: int):
        """Record that we are about to create *thread_name* under *channel_id*."""
        self._ledger[(thread_name, channel_id)] = self._clock()

    def is_suppressed(self, thread_name: str, channel_id: int) -> bool:
        created = self._ledger.get((thread_name, channel_id))
        if created is None:
            return False
        return self._clock() - created < self._suppression_window_ms

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop ledger and relayed entries past the retention window. Returns the number removed."""
        now = self._clock() if now is None else now
        stale = [key for key, ts in self._ledger.items() if now - ts >= self._retention_ms]
        for key in stale:
            del self._ledger[key]
        expired = [mid for mid, ts in self._relayed.items() if now - ts >= self._retention_ms]
        for mid in expired:
            del self._relayed[mid]
        removed = len(stale) + len(expired)
        if removed:
            _debug(f"[RaceGuard] swept {removed} expired entr{'y' if removed == 1 else 'ies'}")
        return removed

    @property
    def ledger_size(self) -> int:
        return len(self._ledger)

    # -- relayed opening messages --

    def mark_relayed(self, message_id: int):
        self._relayed[message_id] = self._clock()

    def forget_relayed(self, message_id: int):
        self._relayed.pop(message_id, None)

    def was_relayed(self, message_id: int) -> bool:
        return message_id in self._relayed

    # -- processing markers --

    def is_processing(self, thread_id: int) -> bool:
        return thread_id in self._processing

    def begin_processing(self, thread_id: int):
        self._processing.add(thread_id)

    def end_processing(self, thread_id: int):
        self._processing.discard(thread_id)

    @contextmanager
    def processing(self, *thread_ids: int) -> Iterator[None]:
        """Hold processing markers for the duration of the block."""
        for thread_id in thread_ids:
            self.begin_processing(thread_id)
        try:
            yield
        finally:
            for thread_id in thread_ids:
                self.end_processing(thread_id)

    @property
    def in_flight(self) -> Set[int]:
        return set(self._processing)
