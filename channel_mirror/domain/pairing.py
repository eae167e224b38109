"""Thread pairing store: durable records plus a bidirectional in-memory index."""

import sys
from typing import Dict, List, Optional

from channel_mirror.domain.models import ThreadPairing
from channel_mirror.errors import PairingConflictError
from channel_mirror.ports.outbound import RecordStorePort


def _log(msg: str):
    print(msg, file=sys.stderr)


class PairingStore:
    """Owns every ThreadPairing.

    The index maps each thread id to its pairing record, so a lookup from
    either side is a single dict hit. Writes go to the record store first;
    the index only changes once the durable write has succeeded.
    """

    def __init__(self, storage: RecordStorePort):
        self._storage = storage
        self._index: Dict[int, ThreadPairing] = {}

    def __len__(self) -> int:
        return len(self._index) // 2

    def __contains__(self, thread_id: int) -> bool:
        return thread_id in self._index

    def lookup(self, thread_id: int) -> Optional[int]:
        """Return the mirror of *thread_id*, or None if it is unpaired."""
        pairing = self._index.get(thread_id)
        if pairing is None:
            return None
        return pairing.partner_of(thread_id)

    def pairings(self) -> List[ThreadPairing]:
        seen = {}
        for pairing in self._index.values():
            seen[(pairing.thread_a, pairing.thread_b)] = pairing
        return list(seen.values())

    def save(self, thread_a: int, thread_b: int) -> ThreadPairing:
        """Persist a new pairing and index both directions.

        Re-saving an identical pair returns the existing record. Raises
        PairingConflictError if either side is paired elsewhere; storage
        errors propagate and leave the index untouched.
        """
        existing = self._existing(thread_a, thread_b)
        if existing is not None:
            return existing

        pairing = ThreadPairing.new(thread_a, thread_b)
        self._storage.write(pairing.record_name, pairing.to_record())
        self._index[thread_a] = pairing
        self._index[thread_b] = pairing
        _log(f"[PairingStore] paired {thread_a} <-> {thread_b}")
        return pairing

    def load_all(self) -> int:
        """Rebuild the index from every stored record. Returns the pairing count."""
        index: Dict[int, ThreadPairing] = {}
        for record in self._storage.load_all():
            try:
                pairing = ThreadPairing.from_record(record)
            except (KeyError, TypeError, ValueError) as e:
                _log(f"[PairingStore] skipping malformed record {record!r}: {e}")
                continue
            clash = index.get(pairing.thread_a) or index.get(pairing.thread_b)
            if clash is not None:
                if (clash.thread_a, clash.thread_b) != (pairing.thread_a, pairing.thread_b):
                    _log(
                        f"[PairingStore] skipping {pairing.thread_a} <-> {pairing.thread_b}: "
                        f"conflicts with {clash.thread_a} <-> {clash.thread_b}"
                    )
                continue
            index[pairing.thread_a] = pairing
            index[pairing.thread_b] = pairing
        self._index = index
        _log(f"[PairingStore] loaded {len(self)} pairing(s)")
        return len(self)

    def _existing(self, thread_a: int, thread_b: int) -> Optional[ThreadPairing]:
        if thread_a == thread_b:
            raise ValueError(f"thread {thread_a} cannot be paired with itself")
        for thread_id, other in ((thread_a, thread_b), (thread_b, thread_a)):
            partner = self.lookup(thread_id)
            if partner is None:
                continue
            if partner != other:
                raise PairingConflictError(thread_id, partner)
            return self._index[thread_id]
        return None
