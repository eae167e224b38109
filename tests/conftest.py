"""Shared mock ports and factories for mirror tests."""

import itertools
from typing import Dict, List, Optional

import pytest

from channel_mirror.domain.models import ChannelPair
from channel_mirror.domain.pairing import PairingStore
from channel_mirror.domain.race_guard import RaceGuard
from channel_mirror.ports.inbound import AuthorInfo, IncomingMessage, IncomingThread

C1 = 1001
C2 = 1002


# --- Mock Ports ---


class MemoryRecordStore:
    """In-memory RecordStorePort."""

    def __init__(self, fail_writes: bool = False):
        self.records: Dict[str, dict] = {}
        self.fail_writes = fail_writes

    def load_all(self) -> List[dict]:
        return [dict(r) for _, r in sorted(self.records.items())]

    def write(self, name: str, record: dict) -> None:
        if self.fail_writes:
            raise OSError("disk full")
        self.records[name] = dict(record)


class MockDelivery:
    """Mock DeliveryPort implementation."""

    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def deliver(self, payload):
        if self.fail:
            raise RuntimeError("webhook unavailable")
        self.sent.append(payload)


class MockThreads:
    """Mock ThreadPort: records calls, hands out sequential thread ids."""

    def __init__(self, first_message: Optional[IncomingMessage] = None, text_channels=(C1, C2)):
        self.first_message = first_message
        self.text_channels = set(text_channels)
        self.created = []
        self.joined = []
        self.fetched = []
        self.on_create = None  # optional hook(parent_id, name, new_id)
        self.fail_create = False
        self.fail_fetch = False
        self._ids = itertools.count(5000)

    async def is_text_channel(self, channel_id):
        return channel_id in self.text_channels

    async def create_thread(self, parent_id, name, private=False, auto_archive_duration=1440):
        if self.fail_create:
            raise RuntimeError("create failed")
        new_id = next(self._ids)
        self.created.append({
            "id": new_id,
            "parent_id": parent_id,
            "name": name,
            "private": private,
            "auto_archive_duration": auto_archive_duration,
        })
        if self.on_create:
            await self.on_create(parent_id, name, new_id)
        return new_id

    async def join_thread(self, thread_id):
        self.joined.append(thread_id)

    async def fetch_first_message(self, thread_id):
        self.fetched.append(thread_id)
        if self.fail_fetch:
            raise RuntimeError("history unavailable")
        return self.first_message


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float):
        self.now += ms


# --- Factories ---


def make_author(**overrides) -> AuthorInfo:
    fields = dict(
        user_id=42,
        username="alice",
        display_name="Alice",
        nickname=None,
        avatar_url="https://cdn.example/avatar.png",
        is_bot=False,
    )
    fields.update(overrides)
    return AuthorInfo(**fields)


def make_message(content="hello", channel_id=C1, *, author=None, **overrides) -> IncomingMessage:
    fields = dict(
        message_id=9001,
        channel_id=channel_id,
        author=author or make_author(),
        content=content,
    )
    fields.update(overrides)
    return IncomingMessage(**fields)


def make_thread(name="Bug Report", thread_id=7001, parent_id=C1, **overrides) -> IncomingThread:
    fields = dict(thread_id=thread_id, name=name, parent_id=parent_id)
    fields.update(overrides)
    return IncomingThread(**fields)


# --- Fixtures ---


@pytest.fixture
def channels():
    return ChannelPair(C1, C2)


@pytest.fixture
def record_store():
    return MemoryRecordStore()


@pytest.fixture
def pairings(record_store):
    return PairingStore(record_store)


@pytest.fixture
def clock():
    return FakeClock(1_000_000.0)


@pytest.fixture
def guard(clock):
    return RaceGuard(clock=clock)


@pytest.fixture
def delivery():
    return MockDelivery()


@pytest.fixture
def threads():
    return MockThreads()
