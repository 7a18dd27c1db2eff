"""Resolve a city to a weather snapshot through cache, live lookup and mock fallback."""
from __future__ import annotations

import json
import logging
import time
from dataclasses import replace
from typing import Callable, Optional, Protocol

from ..abstractions import CACHE_BYPASS, CACHE_HIT, CACHE_MISS, SnapshotCache, WeatherSnapshot
from ..cache import dump_snapshot_payload
from ..config import WeatherConfig
from ..health import HealthRegistry
from ..keys import UNKNOWN_CITY, bucket_index, build_cache_key, normalize_city
from ..providers.mock import MockWeatherGenerator
from .live import UNEXPECTED, LiveWeatherLookup, LookupFailure, LookupResult, LookupSuccess


logger = logging.getLogger(__name__)

TEMPERATURE_RANGE = (8.0, 32.0)
HUMIDITY_RANGE = (30, 85)


class LiveLookup(Protocol):
    async def lookup(self, city: str, *, timeout_ms: int, debug_raw: bool = False) -> LookupResult:
        ...


def clamp(value: float, minimum: float, maximum: float) -> float:
    return max(minimum, min(maximum, value))


def clamp_snapshot(snapshot: WeatherSnapshot) -> WeatherSnapshot:
    return replace(
        snapshot,
        temperature_c=float(clamp(snapshot.temperature_c, *TEMPERATURE_RANGE)),
        humidity=int(round(clamp(snapshot.humidity, *HUMIDITY_RANGE))),
    )


class WeatherResolver:
    """Sequence normalize -> cache -> live or mock -> clamp -> store.

    ``get_weather_by_city`` never raises: every failure below it degrades to
    the deterministic mock snapshot.
    """

    def __init__(
        self,
        *,
        cache: SnapshotCache,
        live_lookup: Optional[LiveLookup] = None,
        mock: Optional[MockWeatherGenerator] = None,
        health: Optional[HealthRegistry] = None,
        time_func: Callable[[], float] = time.time,
    ) -> None:
        self.cache = cache
        self.live_lookup = live_lookup or LiveWeatherLookup()
        self.mock = mock or MockWeatherGenerator()
        self.health = health
        self._time_func = time_func
        self._log = logging.getLogger(self.__class__.__name__)

    # Public API ---------------------------------------------------------
    async def get_weather_by_city(self, city: Optional[str], config: Optional[WeatherConfig] = None) -> WeatherSnapshot:
        config = config or WeatherConfig()
        normalized = normalize_city(city)
        bucket = bucket_index(self._time_func(), config.cache_ttl_seconds)
        cache_key = build_cache_key(config.cache_provider, normalized, bucket)

        if not config.cache_disabled:
            cached = await self._read_cache(cache_key)
            if cached is not None:
                self._log.debug("Cache hit for %s", cache_key)
                return self._finish(clamp_snapshot(cached), cache_key, normalized, CACHE_HIT)

        snapshot: Optional[WeatherSnapshot] = None
        if config.live_enabled:
            result = await self._attempt_live((city or "").strip() or UNKNOWN_CITY, config)
            if isinstance(result, LookupSuccess):
                snapshot = result.snapshot
            else:
                self._log.info("Live lookup for %r failed (%s), using mock weather", normalized, result.reason)
                if self.health is not None:
                    self.health.record_provider_error(result.reason)
        if snapshot is None:
            snapshot = self.mock.generate(normalized)

        snapshot = clamp_snapshot(snapshot)

        if config.cache_disabled:
            return self._finish(snapshot, cache_key, normalized, CACHE_BYPASS)

        await self._write_cache(cache_key, snapshot, config.cache_ttl_seconds)
        return self._finish(snapshot, cache_key, normalized, CACHE_MISS)

    # Helpers ------------------------------------------------------------
    async def _attempt_live(self, city: str, config: WeatherConfig) -> LookupResult:
        try:
            return await self.live_lookup.lookup(city, timeout_ms=config.timeout_ms, debug_raw=config.debug_raw)
        except Exception as exc:  # noqa: BLE001 - a broken lookup still degrades to mock
            self._log.warning("Live lookup raised for %r: %s", city, exc)
            return LookupFailure(UNEXPECTED, repr(exc))

    async def _read_cache(self, cache_key: str) -> Optional[WeatherSnapshot]:
        try:
            raw = await self.cache.get(cache_key)
        except Exception as exc:  # noqa: BLE001 - an unreadable cache is a miss
            self._log.warning("Cache read failed for %s: %s", cache_key, exc)
            return None
        if raw is None:
            self._log.debug("Cache miss for %s", cache_key)
            return None
        try:
            return WeatherSnapshot.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            self._log.warning("Discarding undecodable cache entry %s: %s", cache_key, exc)
            return None

    async def _write_cache(self, cache_key: str, snapshot: WeatherSnapshot, ttl_seconds: int) -> None:
        try:
            await self.cache.put(cache_key, dump_snapshot_payload(snapshot.to_cache_payload()), ttl_seconds)
        except Exception as exc:  # noqa: BLE001 - the snapshot is returned even if it cannot be stored
            self._log.warning("Cache write failed for %s: %s", cache_key, exc)

    def _finish(self, snapshot: WeatherSnapshot, cache_key: str, normalized: str, status: str) -> WeatherSnapshot:
        if self.health is not None:
            self.health.record_cache_status(status)
        return snapshot.with_context(cache_key=cache_key, normalized_city=normalized, cache_status=status)


async def get_weather_by_city(
    city: Optional[str],
    *,
    cache: SnapshotCache,
    config: Optional[WeatherConfig] = None,
    live_lookup: Optional[LiveLookup] = None,
    health: Optional[HealthRegistry] = None,
) -> WeatherSnapshot:
    resolver = WeatherResolver(cache=cache, live_lookup=live_lookup, health=health)
    return await resolver.get_weather_by_city(city, config)


__all__ = ["WeatherResolver", "clamp", "clamp_snapshot", "get_weather_by_city"]
