"""Runtime settings resolved from environment variables."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from gem_readme_mcp.errors import ConfigError

_ENV_PREFIX = "GEM_README_MCP_"

DEFAULT_REGISTRY_URL = "https://rubygems.org"


@dataclass(frozen=True, slots=True)
class Settings:
    """Application settings. Build with ``Settings.from_env()``."""

    registry_url: str = DEFAULT_REGISTRY_URL
    timeout: float = 30.0
    connect_timeout: float = 10.0
    cache_max_entries: int = 1000
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if not self.registry_url.startswith(("https://", "http://")):
            raise ConfigError(
                f"{_ENV_PREFIX}REGISTRY_URL must be an http(s) URL, got '{self.registry_url}'"
            )
        if self.timeout <= 0 or self.connect_timeout <= 0:
            raise ConfigError("HTTP timeouts must be positive numbers of seconds")
        if self.cache_max_entries < 0:
            raise ConfigError(f"{_ENV_PREFIX}CACHE_MAX_ENTRIES must be >= 0 (0 disables the bound)")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigError(f"{_ENV_PREFIX}LOG_LEVEL '{self.log_level}' is not a logging level")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Read ``GEM_README_MCP_*`` variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        return cls(
            registry_url=env.get(f"{_ENV_PREFIX}REGISTRY_URL", DEFAULT_REGISTRY_URL).rstrip("/"),
            timeout=_parse_float(env, "TIMEOUT", 30.0),
            connect_timeout=_parse_float(env, "CONNECT_TIMEOUT", 10.0),
            cache_max_entries=_parse_int(env, "CACHE_MAX_ENTRIES", 1000),
            log_level=env.get(f"{_ENV_PREFIX}LOG_LEVEL", "WARNING").upper(),
        )

    @property
    def cache_bound(self) -> int | None:
        """Size bound for the cache, or None when unbounded."""
        return self.cache_max_entries or None


def _parse_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(f"{_ENV_PREFIX}{name}")
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{_ENV_PREFIX}{name} must be a number, got '{raw}'") from exc


def _parse_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(f"{_ENV_PREFIX}{name}")
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{_ENV_PREFIX}{name} must be an integer, got '{raw}'") from exc
