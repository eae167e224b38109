"""Discord adapter: bridges discord.Client gateway events to MirrorEngine.

DiscordMirrorClient converts messages and new threads into inbound events and
publishes them on the engine's bus. It never decides anything itself beyond
dropping traffic outside the channel pair.
"""

import sys
from typing import Optional

import discord

from channel_mirror.adapters.discord.convert import to_incoming_message, to_incoming_thread
from channel_mirror.adapters.discord.webhook import WebhookDelivery
from channel_mirror.domain.engine import MirrorEngine
from channel_mirror.domain.models import ChannelPair
from channel_mirror.ports.inbound import MessagePosted, ThreadCreated


def _log(msg: str):
    print(msg, file=sys.stderr)


class DiscordMirrorClient(discord.Client):
    """Thin Discord client that feeds the mirror engine."""

    def __init__(self, channels: ChannelPair, **discord_kwargs):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents, **discord_kwargs)
        self._channels = channels
        self._engine: Optional[MirrorEngine] = None
        self._delivery: Optional[WebhookDelivery] = None

    def wire(self, engine: MirrorEngine, delivery: Optional[WebhookDelivery] = None):
        """Attach the engine (and the delivery adapter to close on shutdown)."""
        self._engine = engine
        self._delivery = delivery

    def _in_pair(self, channel) -> bool:
        if isinstance(channel, discord.Thread):
            return self._channels.contains(channel.parent_id)
        return self._channels.contains(channel.id)

    async def on_ready(self):
        _log(f"[DiscordMirrorClient] logged in as {self.user}")
        _log(
            f"[DiscordMirrorClient] syncing messages between channels: "
            f"{self._channels.first} <-> {self._channels.second}"
        )
        if self._engine:
            await self._engine.start()

    async def on_message(self, message: discord.Message):
        if not self._engine:
            return
        if self.user and message.author == self.user:
            return
        if not self._in_pair(message.channel):
            return
        self._engine.publish(MessagePosted(to_incoming_message(message)))

    async def on_thread_create(self, thread: discord.Thread):
        if not self._engine:
            return
        if not self._channels.contains(thread.parent_id):
            return
        self._engine.publish(ThreadCreated(to_incoming_thread(thread)))

    async def close(self):
        if self._engine:
            await self._engine.stop()
        if self._delivery:
            await self._delivery.close()
        await super().close()
