"""Tests for the typed MirrorConfig."""

import pytest

from channel_mirror.config import (
    LEDGER_RETENTION_MS,
    REQUIRED_VARS,
    SUPPRESSION_WINDOW_MS,
    SWEEP_INTERVAL_MS,
    GuardConfig,
    MirrorConfig,
)
from channel_mirror.errors import ConfigError


def _env(**overrides):
    env = {
        "CHANNEL_1_ID": "1001",
        "CHANNEL_2_ID": "1002",
        "WEBHOOK_1_URL": "https://discord.com/api/webhooks/1/aaa",
        "WEBHOOK_2_URL": "https://discord.com/api/webhooks/2/bbb",
        "BOT_TOKEN": "token",
    }
    env.update(overrides)
    return env


class TestGuardConfig:
    def test_defaults(self):
        c = GuardConfig()
        assert c.suppression_window_ms == SUPPRESSION_WINDOW_MS == 5000
        assert c.retention_ms == LEDGER_RETENTION_MS == 10000
        assert c.sweep_interval_ms == SWEEP_INTERVAL_MS == 5000


class TestMirrorConfig:
    def test_from_env(self):
        c = MirrorConfig.from_env(_env())
        assert c.channel_pair == (1001, 1002)
        assert c.webhook_urls == {
            1001: "https://discord.com/api/webhooks/1/aaa",
            1002: "https://discord.com/api/webhooks/2/bbb",
        }
        assert c.bot_token == "token"
        assert c.data_dir == "data"
        assert c.status_port == 0

    def test_optional_overrides(self):
        c = MirrorConfig.from_env(_env(
            MIRROR_DATA_DIR="/var/lib/mirror",
            MIRROR_STATUS_PORT="8080",
            MIRROR_SUPPRESSION_WINDOW_MS="2000",
        ))
        assert c.pairings_dir.endswith("pairings")
        assert c.pairings_dir.startswith("/var/lib/mirror")
        assert c.status_port == 8080
        assert c.guard.suppression_window_ms == 2000
        assert c.guard.retention_ms == 10000

    def test_missing_lists_all(self):
        assert MirrorConfig.missing({}) == list(REQUIRED_VARS)
        assert MirrorConfig.missing(_env(BOT_TOKEN="  ")) == ["BOT_TOKEN"]

    def test_missing_raises(self):
        env = _env()
        del env["WEBHOOK_2_URL"]
        with pytest.raises(ConfigError, match="WEBHOOK_2_URL"):
            MirrorConfig.from_env(env)

    def test_non_numeric_channel(self):
        with pytest.raises(ConfigError, match="CHANNEL_1_ID"):
            MirrorConfig.from_env(_env(CHANNEL_1_ID="general"))

    def test_same_channel_twice(self):
        with pytest.raises(ConfigError):
            MirrorConfig.from_env(_env(CHANNEL_2_ID="1001"))

    def test_bad_optional_int(self):
        with pytest.raises(ConfigError, match="MIRROR_STATUS_PORT"):
            MirrorConfig.from_env(_env(MIRROR_STATUS_PORT="eighty"))
