"""Runtime settings for restcache.

The cache has few knobs: where the API snapshot is mounted inside a host
application's root state, how many selector instances the descriptor
registry keeps alive, how many snapshots share resolved entities, and how
logs are emitted.

Features:
    - **RestCacheSettings:** state_key, selector_cache_size,
      denormalizer_cache_size, log_level, json_logs
    - **env_prefix:** ``RESTCACHE_`` environment variables
    - **.env file support:** Automatic loading via pydantic-settings
    - **Extra ignore:** Unknown env vars don't cause startup failures

Examples:
    >>> import os
    >>> os.environ["RESTCACHE_STATE_KEY"] = "api"
    >>> get_settings(_force_reload=True).state_key
    'api'

Tags:
    settings, configuration, pydantic, environment, restcache

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RestCacheSettings(BaseSettings):
    """Settings for the selector layer.

    Fields
    ──────
    state_key            : Key under which the ApiState is mounted in a root mapping
    selector_cache_size  : Max selector instances kept in the shared registry (LRU)
    denormalizer_cache_size : Max ``resources`` tuples whose resolved entities are kept
    log_level            : Structlog log level
    json_logs            : JSON log output (``None`` → auto-detect from tty)
    """

    model_config = SettingsConfigDict(
        env_prefix="RESTCACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── State ────────────────────────────────────────────────────
    state_key: str = "wp"

    # ── Memoization ──────────────────────────────────────────────
    selector_cache_size: int = Field(
        default=256,
        ge=1,
        description=(
            "Selector instances kept alive in the registry shared by"
            " select_request_raw and select_request"
        ),
    )
    denormalizer_cache_size: int = Field(
        default=8,
        ge=1,
        description="resources tuples whose resolved entities are shared (LRU)",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value!r}")
        return level


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, RestCacheSettings] = {}


def get_settings(*, _force_reload: bool = False) -> RestCacheSettings:
    """Load, validate, and cache a :class:`RestCacheSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = RestCacheSettings()
    _settings_cache["default"] = settings
    return settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    _settings_cache.clear()


__all__ = [
    "RestCacheSettings",
    "get_settings",
    "reset_settings",
]
