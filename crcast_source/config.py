"""YAML configuration loader and validation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.yaml")


@dataclass
class CrCastConfig:
    """Connection settings for the CrCast API.

    ``timeout_ms`` applies to each phase of a request separately (connect,
    read, write, and waiting on httpx's own connection pool), not to the
    request as a whole.
    """

    base_url: str = "https://api.crcast.cc/v1/"
    timeout_ms: int = 10000
    simultaneous_connections: int = 2


@dataclass
class AppConfig:
    """Top-level application configuration."""

    crcast: CrCastConfig = field(default_factory=CrCastConfig)


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load configuration from a YAML file, falling back to defaults."""
    config_path = path or DEFAULT_CONFIG_PATH
    if not config_path.exists():
        logger.info("No config file at %s, using defaults", config_path)
        config = AppConfig()
    else:
        logger.info("Loading config from %s", config_path)
        with open(config_path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f)
        config = _parse_config(raw) if raw else AppConfig()

    _validate_config(config)
    return config


def _parse_config(raw: Dict[str, Any]) -> AppConfig:
    """Parse raw YAML dict into AppConfig."""
    config = AppConfig()

    if "crcast" in raw:
        cc = raw["crcast"] or {}
        defaults = config.crcast
        config.crcast = CrCastConfig(
            base_url=str(cc.get("base_url", defaults.base_url)),
            timeout_ms=int(cc.get("timeout_ms", defaults.timeout_ms)),
            simultaneous_connections=int(
                cc.get("simultaneous_connections", defaults.simultaneous_connections)
            ),
        )

    return config


def _validate_config(config: AppConfig) -> None:
    """Validate config and raise on errors."""
    cc = config.crcast
    if not cc.base_url:
        raise ValueError("Config error: crcast.base_url must not be empty")
    # Canonical deck URLs are built by appending to the base URL.
    if not cc.base_url.endswith("/"):
        raise ValueError(
            f"Config error: crcast.base_url must end with '/', got '{cc.base_url}'"
        )
    if cc.timeout_ms <= 0:
        raise ValueError(f"Config error: crcast.timeout_ms must be positive, got {cc.timeout_ms}")
    if cc.simultaneous_connections <= 0:
        raise ValueError(
            "Config error: crcast.simultaneous_connections must be positive, "
            f"got {cc.simultaneous_connections}"
        )

    logger.info(
        "Config validated: crcast -> %s (timeout %d ms, %d connections)",
        cc.base_url,
        cc.timeout_ms,
        cc.simultaneous_connections,
    )
