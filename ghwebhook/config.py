"""Receiver configuration."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ghwebhook.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_META_URL = "https://api.github.com/meta"


class WebhookConfig(BaseModel):
    """Settings for the webhook receiver. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    secret: str = ""  # empty disables signature verification
    restrict_addr: bool = False
    trust_addrs: list[str] = Field(default_factory=list)  # e.g. reverse proxies
    host: str = "127.0.0.1"
    port: int = 8080
    max_body_bytes: int = 25 * 1024 * 1024  # GitHub caps payloads at 25 MB
    meta_url: str = DEFAULT_META_URL
    meta_timeout_seconds: float = 10.0
    log_level: str = "INFO"


def load_config(config_path: Path) -> WebhookConfig:
    """Load ``WebhookConfig`` from a JSON file.

    A missing file yields the defaults. Malformed JSON or invalid values raise
    `ConfigurationError`.
    """
    if not config_path.exists():
        logger.info("No config at %s, using defaults", config_path)
        return WebhookConfig()
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        msg = f"Cannot read config {config_path}: {exc}"
        raise ConfigurationError(msg) from exc
    try:
        config = WebhookConfig.model_validate(data)
    except ValidationError as exc:
        msg = f"Invalid config {config_path}: {exc}"
        raise ConfigurationError(msg) from exc
    logger.info(
        "Config loaded from %s (restrict_addr=%s, trust_addrs=%d, secret=%s)",
        config_path,
        config.restrict_addr,
        len(config.trust_addrs),
        "set" if config.secret else "unset",
    )
    return config
