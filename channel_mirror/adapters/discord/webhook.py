"""DeliveryPort implementation using Discord webhooks over aiohttp."""

import io
import sys
from pathlib import PurePosixPath
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse

import aiohttp
import discord

from channel_mirror.errors import DeliveryError
from channel_mirror.ports.outbound import RelayPayload

# Webhook upload limits
_MAX_FILES = 10
_MAX_UPLOAD_BYTES = 25 * 1024 * 1024


def _log(msg: str):
    print(msg, file=sys.stderr)


def _filename_from_url(url: str) -> str:
    name = PurePosixPath(urlparse(url).path).name
    return name or "attachment"


class WebhookDelivery:
    """Posts relayed messages through the webhook configured for each channel."""

    def __init__(
        self,
        webhook_urls: Dict[int, str],
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self._webhook_urls = dict(webhook_urls)
        self._session = session
        self._owns_session = session is None
        self._webhooks: Dict[int, discord.Webhook] = {}

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
            self._webhooks.clear()
        return self._session

    def _webhook(self, channel_id: int) -> discord.Webhook:
        webhook = self._webhooks.get(channel_id)
        if webhook is None:
            url = self._webhook_urls.get(channel_id)
            if not url:
                raise DeliveryError(f"no webhook configured for channel {channel_id}")
            webhook = discord.Webhook.from_url(url, session=self._get_session())
            self._webhooks[channel_id] = webhook
        return webhook

    async def _download(self, urls: List[str]) -> Tuple[List[discord.File], List[str]]:
        """Fetch attachments for re-upload. URLs that can't be uploaded come back as links."""
        files: List[discord.File] = []
        links: List[str] = []
        session = self._get_session()
        for url in urls:
            if len(files) >= _MAX_FILES:
                links.append(url)
                continue
            try:
                async with session.get(url) as resp:
                    if resp.status != 200:
                        links.append(url)
                        continue
                    if (resp.content_length or 0) > _MAX_UPLOAD_BYTES:
                        links.append(url)
                        continue
                    data = await resp.read()
            except aiohttp.ClientError as e:
                _log(f"[WebhookDelivery] attachment download failed ({url}): {e}")
                links.append(url)
                continue
            if len(data) > _MAX_UPLOAD_BYTES:
                links.append(url)
                continue
            files.append(discord.File(io.BytesIO(data), filename=_filename_from_url(url)))
        return files, links

    async def deliver(self, payload: RelayPayload) -> None:
        webhook = self._webhook(payload.channel_id)
        files, links = await self._download(payload.attachment_urls)

        content = payload.content
        if links:
            content = "\n".join(part for part in [content, *links] if part)

        kwargs = {
            "username": payload.username,
            "avatar_url": payload.avatar_url,
            "allowed_mentions": (
                discord.AllowedMentions.none() if payload.suppress_mentions else discord.AllowedMentions.all()
            ),
        }
        if content:
            kwargs["content"] = content
        if payload.embeds:
            kwargs["embeds"] = payload.embeds
        if files:
            kwargs["files"] = files
        if payload.thread_id is not None:
            kwargs["thread"] = discord.Object(id=payload.thread_id)

        try:
            await webhook.send(**kwargs)
        except discord.HTTPException as e:
            raise DeliveryError(f"webhook send to {payload.channel_id} failed: {e}") from e

    async def close(self):
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._webhooks.clear()
