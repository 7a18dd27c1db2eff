"""Per-call weather configuration read from ``WEATHER_*`` variables."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional


logger = logging.getLogger(__name__)

PROVIDER_AUTO = "auto"
PROVIDER_OPEN_METEO = "open-meteo"
PROVIDER_MOCK = "mock"
PROVIDER_CHOICES = (PROVIDER_AUTO, PROVIDER_OPEN_METEO, PROVIDER_MOCK)

DEFAULT_TTL_SECONDS = 600
DEFAULT_TIMEOUT_MS = 4000

ENV_KEYS = (
    "WEATHER_PROVIDER",
    "WEATHER_CACHE_TTL_SECONDS",
    "WEATHER_TIMEOUT_MS",
    "WEATHER_CACHE_DISABLED",
    "WEATHER_DEBUG_RAW",
)

_TRUTHY = {"1", "true", "yes", "on"}


def _positive_int(name: str, value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        parsed = int(float(value))
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid %s=%r, using %s", name, value, default)
        return default
    if parsed <= 0:
        logger.warning("Ignoring non-positive %s=%r, using %s", name, value, default)
        return default
    return parsed


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().lower() in _TRUTHY


@dataclass(frozen=True)
class WeatherConfig:
    provider: str = PROVIDER_AUTO
    cache_ttl_seconds: int = DEFAULT_TTL_SECONDS
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    cache_disabled: bool = False
    debug_raw: bool = False

    @property
    def live_enabled(self) -> bool:
        return self.provider != PROVIDER_MOCK

    @property
    def cache_provider(self) -> str:
        """Provider segment of the cache key."""
        return PROVIDER_MOCK if self.provider == PROVIDER_MOCK else PROVIDER_OPEN_METEO

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, Any]] = None) -> "WeatherConfig":
        """Build a config from ``WEATHER_*`` values; absent or bad values use defaults."""
        env = env or {}
        provider = str(env.get("WEATHER_PROVIDER") or PROVIDER_AUTO).strip().lower()
        if provider not in PROVIDER_CHOICES:
            logger.warning("Unknown WEATHER_PROVIDER %r, falling back to %s", provider, PROVIDER_AUTO)
            provider = PROVIDER_AUTO
        return cls(
            provider=provider,
            cache_ttl_seconds=_positive_int(
                "WEATHER_CACHE_TTL_SECONDS", env.get("WEATHER_CACHE_TTL_SECONDS"), DEFAULT_TTL_SECONDS
            ),
            timeout_ms=_positive_int("WEATHER_TIMEOUT_MS", env.get("WEATHER_TIMEOUT_MS"), DEFAULT_TIMEOUT_MS),
            cache_disabled=_flag(env.get("WEATHER_CACHE_DISABLED")),
            debug_raw=_flag(env.get("WEATHER_DEBUG_RAW")),
        )


__all__ = ["ENV_KEYS", "PROVIDER_CHOICES", "WeatherConfig"]
