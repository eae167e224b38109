"""MirrorEngine: event bus, per-event handler tasks, and the ledger sweep loop.

No framework dependencies; adapters publish typed events and the engine
does the rest.
"""

import asyncio
import sys
from typing import Optional, Set

from channel_mirror.config import SWEEP_INTERVAL_MS
from channel_mirror.domain.mirror import MirrorOutcome, ThreadMirrorCreator
from channel_mirror.domain.race_guard import RaceGuard
from channel_mirror.domain.relay import RelayDispatcher
from channel_mirror.ports.inbound import MessagePosted, MirrorEvent, ThreadCreated


def _log(msg: str):
    print(msg, file=sys.stderr)


class EventBus:
    """Single inbound queue of typed events."""

    def __init__(self):
        self._queue: "asyncio.Queue[MirrorEvent]" = asyncio.Queue()

    def publish(self, event: MirrorEvent):
        self._queue.put_nowait(event)

    async def next(self) -> MirrorEvent:
        return await self._queue.get()

    def task_done(self):
        self._queue.task_done()

    async def drain(self):
        """Wait until every published event has been taken off the queue."""
        await self._queue.join()

    def qsize(self) -> int:
        return self._queue.qsize()


class MirrorEngine:
    """Consumes events one at a time and hands each to its own task.

    Handlers interleave at their awaits; a stalled platform call only holds
    up the task it belongs to.
    """

    def __init__(
        self,
        dispatcher: RelayDispatcher,
        creator: ThreadMirrorCreator,
        guard: RaceGuard,
        bus: Optional[EventBus] = None,
        sweep_interval_ms: int = SWEEP_INTERVAL_MS,
    ):
        self._dispatcher = dispatcher
        self._creator = creator
        self._guard = guard
        self.bus = bus or EventBus()
        self._sweep_interval = sweep_interval_ms / 1000
        self._consumer_task: Optional[asyncio.Task] = None
        self._sweep_task: Optional[asyncio.Task] = None
        self._handler_tasks: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._consumer_task is not None and not self._consumer_task.done()

    @property
    def pending_tasks(self) -> int:
        return len(self._handler_tasks)

    def publish(self, event: MirrorEvent):
        self.bus.publish(event)

    async def start(self):
        """Start the consumer and sweep loops (idempotent)."""
        if not self._consumer_task or self._consumer_task.done():
            self._consumer_task = asyncio.create_task(self._consume_loop())
        if not self._sweep_task or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_loop())

    async def stop(self):
        """Stop both loops and wait for in-flight handlers to finish."""
        for task in (self._consumer_task, self._sweep_task):
            if task and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._consumer_task = None
        self._sweep_task = None
        if self._handler_tasks:
            await asyncio.gather(*self._handler_tasks, return_exceptions=True)

    async def wait_idle(self):
        """Wait for the queue to empty and all spawned handlers to complete."""
        while True:
            await self.bus.drain()
            if not self._handler_tasks:
                return
            # Handlers may publish follow-up events, so drain again afterwards
            await asyncio.gather(*list(self._handler_tasks), return_exceptions=True)

    async def _consume_loop(self):
        _log("[MirrorEngine] event loop started")
        while True:
            event = await self.bus.next()
            try:
                task = asyncio.create_task(self.handle(event))
                self._handler_tasks.add(task)
                task.add_done_callback(self._handler_tasks.discard)
            finally:
                self.bus.task_done()

    async def _sweep_loop(self):
        while True:
            await asyncio.sleep(self._sweep_interval)
            try:
                self._guard.sweep()
            except Exception as e:
                _log(f"[MirrorEngine] sweep error: {e}")

    async def handle(self, event: MirrorEvent):
        """Handle one event. Errors stop here and never reach other handlers."""
        try:
            if isinstance(event, MessagePosted):
                await self.on_message(event)
            elif isinstance(event, ThreadCreated):
                await self.on_thread_created(event)
            else:
                _log(f"[MirrorEngine] unknown event type: {type(event).__name__}")
        except Exception as e:
            _log(f"[MirrorEngine] error handling {type(event).__name__}: {e}")

    async def on_message(self, event: MessagePosted) -> bool:
        return await self._dispatcher.dispatch(event.message)

    async def on_thread_created(self, event: ThreadCreated) -> MirrorOutcome:
        return await self._creator.on_thread_created(event.thread)
