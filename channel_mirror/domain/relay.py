"""Relay dispatcher: decides where a message goes and re-posts it there."""

import re
import sys
from typing import Optional

from channel_mirror.config import VERBOSE
from channel_mirror.domain.models import ChannelPair, Destination
from channel_mirror.domain.pairing import PairingStore
from channel_mirror.domain.race_guard import RaceGuard
from channel_mirror.domain.sanitizer import ZWSP, sanitize_mentions
from channel_mirror.ports.inbound import AuthorInfo, IncomingMessage
from channel_mirror.ports.outbound import DeliveryPort, RelayPayload

# Discord rejects webhook usernames longer than this
MAX_USERNAME_LENGTH = 80

# Webhook usernames may not contain these words
_RESERVED_NAME_RE = re.compile(r"discord|clyde", re.IGNORECASE)


def _log(msg: str):
    print(msg, file=sys.stderr)


def _debug(msg: str):
    if VERBOSE:
        _log(msg)


def display_identity(author: AuthorInfo) -> str:
    """Nickname (or global display name) with the account name for disambiguation."""
    name = author.nickname or author.display_name or author.username
    label = f"{name} ({author.username})"
    label = _RESERVED_NAME_RE.sub(lambda m: m.group(0)[0] + ZWSP + m.group(0)[1:], label)
    if len(label) > MAX_USERNAME_LENGTH:
        label = label[:MAX_USERNAME_LENGTH - 1] + "…"
    return label


class RelayDispatcher:
    """Routes messages between the channel pair and paired threads."""

    def __init__(
        self,
        channels: ChannelPair,
        pairings: PairingStore,
        delivery: DeliveryPort,
        guard: Optional[RaceGuard] = None,
    ):
        self._channels = channels
        self._pairings = pairings
        self._delivery = delivery
        self._guard = guard

    def route_message(
        self,
        source_id: int,
        is_thread: bool,
        parent_id: Optional[int] = None,
    ) -> Optional[Destination]:
        """Destination for a message posted in *source_id*, or None to drop it."""
        if not is_thread:
            partner = self._channels.partner_of(source_id)
            if partner is None:
                return None
            return Destination(channel_id=partner)

        mirror_thread = self._pairings.lookup(source_id)
        if mirror_thread is None:
            return None
        partner_channel = self._channels.partner_of(parent_id)
        if partner_channel is None:
            return None
        return Destination(channel_id=partner_channel, thread_id=mirror_thread)

    def should_relay(self, message: IncomingMessage) -> bool:
        """Bot, webhook and system messages are never relayed."""
        return not (message.is_automated or message.is_system)

    def build_payload(self, message: IncomingMessage, destination: Destination) -> RelayPayload:
        return RelayPayload(
            channel_id=destination.channel_id,
            thread_id=destination.thread_id,
            username=display_identity(message.author),
            avatar_url=message.author.avatar_url,
            content=sanitize_mentions(message.content),
            embeds=list(message.embeds),
            attachment_urls=list(message.attachment_urls),
            suppress_mentions=True,
        )

    async def relay(self, message: IncomingMessage, destination: Destination) -> bool:
        """Deliver *message* to *destination*. Best effort: failures are logged, not retried."""
        payload = self.build_payload(message, destination)
        if payload.content is None and not payload.embeds and not payload.attachment_urls:
            _debug(f"[Relay] message {message.message_id} has nothing to deliver")
            return False
        try:
            await self._delivery.deliver(payload)
        except Exception as e:
            _log(f"[Relay] failed to relay message {message.message_id} to {destination}: {e}")
            return False
        target = destination.thread_id or destination.channel_id
        _log(f"[Relay] synced message {message.message_id} from {message.channel_id} to {target}")
        return True

    async def dispatch(self, message: IncomingMessage) -> bool:
        """Route and relay a posted message. Returns True if it was delivered."""
        if not self.should_relay(message):
            return False
        if self._guard and self._guard.was_relayed(message.message_id):
            _debug(f"[Relay] message {message.message_id} already relayed as a thread opener")
            return False
        destination = self.route_message(message.channel_id, message.is_thread, message.parent_id)
        if destination is None:
            _debug(f"[Relay] no destination for message in {message.channel_id}")
            return False
        return await self.relay(message, destination)
