"""Tests for configuration loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from ghwebhook.config import DEFAULT_META_URL, WebhookConfig, load_config
from ghwebhook.errors import ConfigurationError


class TestWebhookConfig:
    def test_defaults(self) -> None:
        config = WebhookConfig()
        assert config.secret == ""
        assert config.restrict_addr is False
        assert config.trust_addrs == []
        assert config.meta_url == DEFAULT_META_URL
        assert config.max_body_bytes == 25 * 1024 * 1024

    def test_frozen(self) -> None:
        config = WebhookConfig()
        with pytest.raises(ValidationError):
            config.secret = "changed"  # type: ignore[misc]

    def test_trust_addrs_order_preserved(self) -> None:
        config = WebhookConfig(trust_addrs=["::1/128", "127.0.0.0/8"])
        assert config.trust_addrs == ["::1/128", "127.0.0.0/8"]


class TestLoadConfig:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "absent.json") == WebhookConfig()

    def test_loads_values(self, tmp_path: Path) -> None:
        path = tmp_path / "ghwebhook.json"
        path.write_text(
            json.dumps(
                {
                    "secret": "very-secret-string",
                    "restrict_addr": True,
                    "trust_addrs": ["::1/128", "127.0.0.0/8"],
                    "port": 9000,
                }
            ),
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.secret == "very-secret-string"
        assert config.restrict_addr is True
        assert config.trust_addrs == ["::1/128", "127.0.0.0/8"]
        assert config.port == 9000

    def test_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "ghwebhook.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_config(path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        path = tmp_path / "ghwebhook.json"
        path.write_text(json.dumps({"port": "eighty"}), encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid config"):
            load_config(path)
