"""Discord adapters (discord.py)."""

from channel_mirror.adapters.discord.adapter import DiscordMirrorClient
from channel_mirror.adapters.discord.threads import DiscordThreadAdapter
from channel_mirror.adapters.discord.webhook import WebhookDelivery

__all__ = ["DiscordMirrorClient", "DiscordThreadAdapter", "WebhookDelivery"]
