"""discord.py objects -> platform-agnostic inbound types."""

import discord

from channel_mirror.ports.inbound import AuthorInfo, IncomingMessage, IncomingThread

# Only rich embeds can be re-sent by a webhook; link previews regenerate from the content
_RELAYABLE_EMBED_TYPES = {"rich"}


def to_author(author) -> AuthorInfo:
    nickname = getattr(author, "nick", None)  # Member only
    global_name = getattr(author, "global_name", None)
    return AuthorInfo(
        user_id=author.id,
        username=author.name,
        display_name=global_name or author.name,
        nickname=nickname,
        avatar_url=str(author.display_avatar.url),
        is_bot=bool(author.bot),
    )


def to_incoming_message(message: discord.Message) -> IncomingMessage:
    channel = message.channel
    is_thread = isinstance(channel, discord.Thread)
    return IncomingMessage(
        message_id=message.id,
        channel_id=channel.id,
        author=to_author(message.author),
        content=message.content or None,
        is_thread=is_thread,
        parent_id=channel.parent_id if is_thread else None,
        embeds=[e for e in message.embeds if e.type in _RELAYABLE_EMBED_TYPES],
        attachment_urls=[a.url for a in message.attachments],
        is_webhook=message.webhook_id is not None,
        is_system=message.is_system(),
    )


def to_incoming_thread(thread: discord.Thread) -> IncomingThread:
    return IncomingThread(
        thread_id=thread.id,
        name=thread.name,
        parent_id=thread.parent_id,
        is_private=thread.type == discord.ChannelType.private_thread,
        auto_archive_duration=thread.auto_archive_duration,
    )
