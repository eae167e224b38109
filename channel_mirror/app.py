"""Process wiring and entry point for the channel mirror."""

import asyncio
import sys
from dataclasses import dataclass
from typing import Optional

import discord
import uvicorn
from fastapi import FastAPI

from channel_mirror.adapters.discord.adapter import DiscordMirrorClient
from channel_mirror.adapters.discord.threads import DiscordThreadAdapter
from channel_mirror.adapters.discord.webhook import WebhookDelivery
from channel_mirror.adapters.storage.json_store import JsonRecordStore
from channel_mirror.adapters.web.status_routes import create_status_app
from channel_mirror.config import REQUIRED_VARS, MirrorConfig
from channel_mirror.domain.engine import MirrorEngine
from channel_mirror.domain.mirror import ThreadMirrorCreator
from channel_mirror.domain.models import ChannelPair
from channel_mirror.domain.pairing import PairingStore
from channel_mirror.domain.race_guard import RaceGuard
from channel_mirror.domain.relay import RelayDispatcher
from channel_mirror.errors import ConfigError


def _log(msg: str):
    print(msg, file=sys.stderr)


@dataclass
class MirrorApp:
    config: MirrorConfig
    channels: ChannelPair
    pairings: PairingStore
    guard: RaceGuard
    delivery: WebhookDelivery
    client: DiscordMirrorClient
    engine: MirrorEngine
    status_app: Optional[FastAPI] = None


def build_app(config: MirrorConfig) -> MirrorApp:
    """Instantiate and wire every component. Nothing touches the network yet."""
    channels = ChannelPair(*config.channel_pair)
    pairings = PairingStore(JsonRecordStore(config.pairings_dir))
    guard = RaceGuard(
        suppression_window_ms=config.guard.suppression_window_ms,
        retention_ms=config.guard.retention_ms,
    )
    delivery = WebhookDelivery(config.webhook_urls)
    client = DiscordMirrorClient(channels)

    dispatcher = RelayDispatcher(channels, pairings, delivery, guard)
    creator = ThreadMirrorCreator(channels, pairings, guard, dispatcher, DiscordThreadAdapter(client))
    engine = MirrorEngine(
        dispatcher, creator, guard,
        sweep_interval_ms=config.guard.sweep_interval_ms,
    )
    client.wire(engine, delivery)

    status_app = None
    if config.status_port:
        status_app = create_status_app(channels, pairings, guard, engine)

    return MirrorApp(config, channels, pairings, guard, delivery, client, engine, status_app)


async def serve_status(server: uvicorn.Server, port: int):
    """Run the status API; a bind failure is logged and the bot keeps going without it."""
    try:
        await server.serve()
    except (OSError, SystemExit) as e:
        _log(f"Status API failed on port {port}: {e!r}")
        return
    if not server.started:
        _log(f"Status API on port {port} did not start")


async def run(app: MirrorApp) -> int:
    """Load pairings, log in, and serve until the client closes. Returns an exit code."""
    try:
        app.pairings.load_all()
    except OSError as e:
        _log(f"Failed to load pairings from {app.config.pairings_dir}: {e}")
        return 1

    server = None
    server_task = None
    if app.status_app is not None:
        server = uvicorn.Server(uvicorn.Config(
            app.status_app, host="127.0.0.1", port=app.config.status_port, log_level="warning",
        ))
        server_task = asyncio.create_task(serve_status(server, app.config.status_port))
        _log(f"Status API on http://127.0.0.1:{app.config.status_port}/mirror/status")

    try:
        await app.client.start(app.config.bot_token)
    except discord.LoginFailure as e:
        _log(f"Failed to login: {e}")
        return 1
    finally:
        if not app.client.is_closed():
            await app.client.close()
        if server is not None:
            server.should_exit = True
            await server_task
    return 0


def main() -> int:
    try:
        config = MirrorConfig.from_env()
    except ConfigError as e:
        _log(f"Error: {e}")
        _log(f"Please set {', '.join(REQUIRED_VARS)} in your .env file")
        return 1
    try:
        return asyncio.run(run(build_app(config)))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
