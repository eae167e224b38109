"""Inbound port: platform-agnostic message and thread representation."""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union


@dataclass
class AuthorInfo:
    """Who posted a message, as far as mirroring needs to know."""

    user_id: int
    username: str
    display_name: str
    nickname: Optional[str] = None
    avatar_url: Optional[str] = None
    is_bot: bool = False


@dataclass
class IncomingMessage:
    """Discord-agnostic message representation."""

    message_id: int
    channel_id: int  # thread id when is_thread
    author: AuthorInfo
    content: Optional[str] = None
    is_thread: bool = False
    parent_id: Optional[int] = None  # parent channel of a thread
    embeds: List[Any] = field(default_factory=list)
    attachment_urls: List[str] = field(default_factory=list)
    is_webhook: bool = False
    is_system: bool = False

    @property
    def is_automated(self) -> bool:
        """Bot accounts and webhook posts (including our own mirrored output)."""
        return self.author.is_bot or self.is_webhook


@dataclass
class IncomingThread:
    """A newly created thread."""

    thread_id: int
    name: str
    parent_id: Optional[int]
    is_private: bool = False
    auto_archive_duration: int = 1440  # minutes


@dataclass
class MessagePosted:
    message: IncomingMessage


@dataclass
class ThreadCreated:
    thread: IncomingThread


MirrorEvent = Union[MessagePosted, ThreadCreated]
