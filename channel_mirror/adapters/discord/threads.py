"""ThreadPort implementation on top of a discord.Client."""

import sys
from typing import Optional

import discord

from channel_mirror.adapters.discord.convert import to_incoming_message
from channel_mirror.ports.inbound import IncomingMessage


def _log(msg: str):
    print(msg, file=sys.stderr)


class DiscordThreadAdapter:
    """Creates, joins and reads threads through the bot session."""

    def __init__(self, client: discord.Client):
        self._client = client

    async def _resolve(self, channel_id: int):
        channel = self._client.get_channel(channel_id)
        if channel is not None:
            return channel
        try:
            return await self._client.fetch_channel(channel_id)
        except (discord.NotFound, discord.Forbidden):
            return None

    async def is_text_channel(self, channel_id: int) -> bool:
        channel = await self._resolve(channel_id)
        return isinstance(channel, discord.TextChannel)

    async def create_thread(
        self,
        parent_id: int,
        name: str,
        private: bool = False,
        auto_archive_duration: int = 1440,
    ) -> int:
        parent = await self._resolve(parent_id)
        if not isinstance(parent, discord.TextChannel):
            raise ValueError(f"channel {parent_id} is not a text channel")
        thread_type = discord.ChannelType.private_thread if private else discord.ChannelType.public_thread
        thread = await parent.create_thread(
            name=name,
            type=thread_type,
            auto_archive_duration=auto_archive_duration,
        )
        return thread.id

    async def join_thread(self, thread_id: int) -> None:
        thread = await self._resolve(thread_id)
        if not isinstance(thread, discord.Thread):
            raise ValueError(f"channel {thread_id} is not a thread")
        await thread.join()

    async def fetch_first_message(self, thread_id: int) -> Optional[IncomingMessage]:
        """Oldest message in the thread, or None if there is none or it can't be read."""
        thread = await self._resolve(thread_id)
        if not isinstance(thread, discord.Thread):
            return None
        try:
            async for message in thread.history(limit=1, oldest_first=True):
                return to_incoming_message(message)
        except discord.HTTPException as e:
            _log(f"[DiscordThreadAdapter] history unavailable for {thread_id}: {e}")
        return None
