"""Tests for WebhookDelivery: webhook send arguments and attachment handling."""

from unittest.mock import AsyncMock, MagicMock, patch

import discord
import pytest

from channel_mirror.adapters.discord.webhook import WebhookDelivery
from channel_mirror.errors import DeliveryError
from channel_mirror.ports.outbound import RelayPayload

C1 = 1001
C2 = 1002
URLS = {C1: "https://discord.com/api/webhooks/1/aaa", C2: "https://discord.com/api/webhooks/2/bbb"}


class FakeResponse:
    def __init__(self, status=200, body=b"data"):
        self.status = status
        self._body = body
        self.content_length = len(body)

    async def read(self):
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    def __init__(self, responses=None):
        self.responses = responses or {}
        self.requested = []
        self.closed = False

    def get(self, url):
        self.requested.append(url)
        return self.responses[url]

    async def close(self):
        self.closed = True


@pytest.fixture
def webhook():
    hook = MagicMock()
    hook.send = AsyncMock()
    with patch("channel_mirror.adapters.discord.webhook.discord.Webhook.from_url", return_value=hook) as from_url:
        hook.from_url = from_url
        yield hook


def _payload(**overrides):
    fields = dict(channel_id=C2, username="Alice (alice)", avatar_url="https://cdn.example/avatar.png", content="hi")
    fields.update(overrides)
    return RelayPayload(**fields)


class TestDeliver:
    @pytest.mark.asyncio
    async def test_channel_send(self, webhook):
        delivery = WebhookDelivery(URLS, session=FakeSession())
        await delivery.deliver(_payload())

        webhook.from_url.assert_called_once()
        assert webhook.from_url.call_args[0][0] == URLS[C2]
        kwargs = webhook.send.call_args.kwargs
        assert kwargs["content"] == "hi"
        assert kwargs["username"] == "Alice (alice)"
        assert kwargs["avatar_url"] == "https://cdn.example/avatar.png"
        assert "thread" not in kwargs
        assert "embeds" not in kwargs
        assert "files" not in kwargs
        mentions = kwargs["allowed_mentions"]
        assert mentions.everyone is False
        assert mentions.users is False
        assert mentions.roles is False

    @pytest.mark.asyncio
    async def test_thread_qualifier(self, webhook):
        delivery = WebhookDelivery(URLS, session=FakeSession())
        await delivery.deliver(_payload(thread_id=8001, embeds=["e"]))
        kwargs = webhook.send.call_args.kwargs
        assert kwargs["thread"].id == 8001
        assert kwargs["embeds"] == ["e"]

    @pytest.mark.asyncio
    async def test_content_omitted_when_none(self, webhook):
        delivery = WebhookDelivery(URLS, session=FakeSession())
        await delivery.deliver(_payload(content=None, embeds=["e"]))
        assert "content" not in webhook.send.call_args.kwargs

    @pytest.mark.asyncio
    async def test_webhook_cached_per_channel(self, webhook):
        delivery = WebhookDelivery(URLS, session=FakeSession())
        await delivery.deliver(_payload())
        await delivery.deliver(_payload())
        assert webhook.from_url.call_count == 1

    @pytest.mark.asyncio
    async def test_unknown_channel(self, webhook):
        delivery = WebhookDelivery(URLS, session=FakeSession())
        with pytest.raises(DeliveryError):
            await delivery.deliver(_payload(channel_id=3333))

    @pytest.mark.asyncio
    async def test_http_error_wrapped(self, webhook):
        response = MagicMock(status=500, reason="Server Error")
        webhook.send.side_effect = discord.HTTPException(response, "boom")
        delivery = WebhookDelivery(URLS, session=FakeSession())
        with pytest.raises(DeliveryError):
            await delivery.deliver(_payload())


class TestAttachments:
    @pytest.mark.asyncio
    async def test_downloaded_and_uploaded(self, webhook):
        url = "https://cdn.example/files/a.png?ex=1"
        session = FakeSession({url: FakeResponse(body=b"png")})
        delivery = WebhookDelivery(URLS, session=session)
        await delivery.deliver(_payload(attachment_urls=[url]))

        files = webhook.send.call_args.kwargs["files"]
        assert len(files) == 1
        assert files[0].filename == "a.png"
        assert webhook.send.call_args.kwargs["content"] == "hi"

    @pytest.mark.asyncio
    async def test_failed_download_becomes_link(self, webhook):
        url = "https://cdn.example/files/gone.png"
        session = FakeSession({url: FakeResponse(status=404)})
        delivery = WebhookDelivery(URLS, session=session)
        await delivery.deliver(_payload(content=None, attachment_urls=[url]))

        kwargs = webhook.send.call_args.kwargs
        assert "files" not in kwargs
        assert kwargs["content"] == url


class TestClose:
    @pytest.mark.asyncio
    async def test_external_session_left_open(self):
        session = FakeSession()
        delivery = WebhookDelivery(URLS, session=session)
        await delivery.close()
        assert session.closed is False
