"""Thread mirror creator: observes a new thread and builds its linked twin.

States: OBSERVED -> GUARDED -> JOINED -> MIRROR_CREATED -> PAIRED ->
FIRST_MESSAGE_RELAYED -> DONE, with ABORTED reachable from any of them.
Processing markers are held for the source thread from GUARDED onward and
for the mirror from MIRROR_CREATED onward; both are released on every exit.
"""

import enum
import sys
from dataclasses import dataclass
from typing import Optional

from channel_mirror.config import VERBOSE
from channel_mirror.domain.models import ChannelPair, Destination
from channel_mirror.domain.pairing import PairingStore
from channel_mirror.domain.race_guard import RaceGuard
from channel_mirror.domain.relay import RelayDispatcher
from channel_mirror.ports.inbound import IncomingMessage, IncomingThread
from channel_mirror.ports.outbound import ThreadPort


def _log(msg: str):
    print(msg, file=sys.stderr)


def _debug(msg: str):
    if VERBOSE:
        _log(msg)


class MirrorState(enum.Enum):
    OBSERVED = "observed"
    GUARDED = "guarded"
    JOINED = "joined"
    MIRROR_CREATED = "mirror_created"
    PAIRED = "paired"
    FIRST_MESSAGE_RELAYED = "first_message_relayed"
    DONE = "done"
    ABORTED = "aborted"


@dataclass
class MirrorOutcome:
    """Result of one mirror attempt."""

    source_id: int
    state: MirrorState
    reached: MirrorState  # last state entered before finishing/aborting
    mirror_id: Optional[int] = None
    reason: str = ""

    @property
    def mirrored(self) -> bool:
        return self.state is MirrorState.DONE


class _Abort(Exception):
    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ThreadMirrorCreator:
    def __init__(
        self,
        channels: ChannelPair,
        pairings: PairingStore,
        guard: RaceGuard,
        dispatcher: RelayDispatcher,
        threads: ThreadPort,
    ):
        self._channels = channels
        self._pairings = pairings
        self._guard = guard
        self._dispatcher = dispatcher
        self._threads = threads

    def _admit(self, thread: IncomingThread) -> Optional[str]:
        """Reason to ignore *thread*, or None if it should be mirrored."""
        if not self._channels.contains(thread.parent_id):
            return "parent is not a mirrored channel"
        if self._pairings.lookup(thread.thread_id) is not None:
            return "already paired"
        if self._guard.is_processing(thread.thread_id):
            return "already being mirrored"
        if self._guard.is_suppressed(thread.name, thread.parent_id):
            return "created by this mirror"
        return None

    async def on_thread_created(self, thread: IncomingThread) -> MirrorOutcome:
        """Run the mirror protocol for *thread*. Never raises."""
        outcome = MirrorOutcome(thread.thread_id, MirrorState.OBSERVED, MirrorState.OBSERVED)

        reason = self._admit(thread)
        if reason:
            _debug(f"[Mirror] ignoring thread {thread.thread_id} ({thread.name!r}): {reason}")
            outcome.state = MirrorState.ABORTED
            outcome.reason = reason
            return outcome

        outcome.reached = MirrorState.GUARDED
        try:
            with self._guard.processing(thread.thread_id):
                await self._mirror(thread, outcome)
        except _Abort as e:
            _log(f"[Mirror] aborted thread {thread.thread_id} ({thread.name!r}): {e.reason}")
            outcome.state = MirrorState.ABORTED
            outcome.reason = e.reason
        except Exception as e:
            _log(f"[Mirror] error mirroring thread {thread.thread_id} at {outcome.reached.value}: {e}")
            outcome.state = MirrorState.ABORTED
            outcome.reason = str(e)
        else:
            outcome.state = MirrorState.DONE
            outcome.reached = MirrorState.DONE
        return outcome

    async def _mirror(self, thread: IncomingThread, outcome: MirrorOutcome):
        await self._threads.join_thread(thread.thread_id)
        first_message = await self._first_message(thread.thread_id)
        outcome.reached = MirrorState.JOINED

        target_id = self._channels.partner_of(thread.parent_id)
        if target_id is None or not await self._threads.is_text_channel(target_id):
            raise _Abort(f"target channel {target_id} missing or not a text channel")

        # Ledger entry goes in before the create call so the echo is caught
        self._guard.mark_creating(thread.name, target_id)
        mirror_id = await self._threads.create_thread(
            target_id,
            thread.name,
            private=thread.is_private,
            auto_archive_duration=thread.auto_archive_duration,
        )
        outcome.mirror_id = mirror_id

        with self._guard.processing(mirror_id):
            outcome.reached = MirrorState.MIRROR_CREATED
            await self._threads.join_thread(mirror_id)

            self._pairings.save(thread.thread_id, mirror_id)
            outcome.reached = MirrorState.PAIRED
            _log(f"[Mirror] created thread {thread.name!r}: {thread.thread_id} -> {mirror_id}")

            if first_message is not None and self._dispatcher.should_relay(first_message):
                destination = Destination(channel_id=target_id, thread_id=mirror_id)
                # Marked before the await: the posted event for this message may already be queued
                self._guard.mark_relayed(first_message.message_id)
                if not await self._dispatcher.relay(first_message, destination):
                    self._guard.forget_relayed(first_message.message_id)
                    _log(f"[Mirror] first message of {thread.thread_id} not relayed; pairing kept")
            outcome.reached = MirrorState.FIRST_MESSAGE_RELAYED

    async def _first_message(self, thread_id: int) -> Optional[IncomingMessage]:
        try:
            return await self._threads.fetch_first_message(thread_id)
        except Exception as e:
            _log(f"[Mirror] could not fetch first message of {thread_id}: {e}")
            return None
