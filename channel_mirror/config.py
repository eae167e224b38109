"""Configuration loaded from the environment (.env supported)."""

__version__ = "0.1.0"

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from dotenv import load_dotenv

from channel_mirror.errors import ConfigError

load_dotenv()

REQUIRED_VARS = ("CHANNEL_1_ID", "CHANNEL_2_ID", "WEBHOOK_1_URL", "WEBHOOK_2_URL", "BOT_TOKEN")

# Race guard timing (milliseconds)
SUPPRESSION_WINDOW_MS = 5000
LEDGER_RETENTION_MS = 10000
SWEEP_INTERVAL_MS = 5000


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


VERBOSE = _env_flag("MIRROR_VERBOSE")


@dataclass
class GuardConfig:
    suppression_window_ms: int = SUPPRESSION_WINDOW_MS
    retention_ms: int = LEDGER_RETENTION_MS
    sweep_interval_ms: int = SWEEP_INTERVAL_MS


@dataclass
class MirrorConfig:
    """Typed configuration for the mirror process."""

    channel_1_id: int = 0
    channel_2_id: int = 0
    webhook_1_url: str = ""
    webhook_2_url: str = ""
    bot_token: str = ""
    data_dir: str = "data"
    status_port: int = 0
    guard: GuardConfig = field(default_factory=GuardConfig)

    @property
    def channel_pair(self) -> Tuple[int, int]:
        return (self.channel_1_id, self.channel_2_id)

    @property
    def webhook_urls(self) -> Dict[int, str]:
        """Webhook URL that posts *into* each channel."""
        return {
            self.channel_1_id: self.webhook_1_url,
            self.channel_2_id: self.webhook_2_url,
        }

    @property
    def pairings_dir(self) -> str:
        return os.path.join(self.data_dir, "pairings")

    @staticmethod
    def missing(environ: Optional[Dict[str, str]] = None) -> List[str]:
        """Names of required variables that are unset or blank."""
        env = os.environ if environ is None else environ
        return [name for name in REQUIRED_VARS if not env.get(name, "").strip()]

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "MirrorConfig":
        """Create MirrorConfig from environment variables.

        Raises ConfigError when a required variable is absent, a channel id
        is not an integer, or both channel ids point at the same channel.
        """
        env = os.environ if environ is None else environ
        missing = cls.missing(env)
        if missing:
            raise ConfigError(
                "Missing required environment variables: " + ", ".join(missing)
            )

        ids = []
        for name in ("CHANNEL_1_ID", "CHANNEL_2_ID"):
            raw = env[name].strip()
            try:
                ids.append(int(raw))
            except ValueError:
                raise ConfigError(f"{name} must be a numeric channel id, got {raw!r}")
        if ids[0] == ids[1]:
            raise ConfigError("CHANNEL_1_ID and CHANNEL_2_ID must be different channels")

        def _int(name: str, default: int) -> int:
            raw = env.get(name, "").strip()
            if not raw:
                return default
            try:
                return int(raw)
            except ValueError:
                raise ConfigError(f"{name} must be an integer, got {raw!r}")

        return cls(
            channel_1_id=ids[0],
            channel_2_id=ids[1],
            webhook_1_url=env["WEBHOOK_1_URL"].strip(),
            webhook_2_url=env["WEBHOOK_2_URL"].strip(),
            bot_token=env["BOT_TOKEN"].strip(),
            data_dir=env.get("MIRROR_DATA_DIR", "").strip() or "data",
            status_port=_int("MIRROR_STATUS_PORT", 0),
            guard=GuardConfig(
                suppression_window_ms=_int("MIRROR_SUPPRESSION_WINDOW_MS", SUPPRESSION_WINDOW_MS),
                retention_ms=_int("MIRROR_RETENTION_MS", LEDGER_RETENTION_MS),
                sweep_interval_ms=_int("MIRROR_SWEEP_INTERVAL_MS", SWEEP_INTERVAL_MS),
            ),
        )
