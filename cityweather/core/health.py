"""In-memory health registry for the health endpoint.

Counters live in process memory and reset on restart; they describe how the
resolver has been answering, not the state of the backing cache.
"""
from __future__ import annotations

from dataclasses import dataclass
from threading import Lock
from typing import Dict

from .abstractions import CACHE_BYPASS, CACHE_HIT, CACHE_MISS


@dataclass(frozen=True)
class CacheStats:
    """Simple container for cache related counters."""

    hits: int = 0
    misses: int = 0
    bypasses: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "bypasses": self.bypasses}


class HealthRegistry:
    """Stores cache status counters and live lookup failures by reason."""

    def __init__(self) -> None:
        self._provider_errors: Dict[str, int] = {}
        self._cache_stats = CacheStats()
        self._lock = Lock()

    # -- Cache status -------------------------------------------------------
    def record_cache_status(self, status: str) -> None:
        with self._lock:
            stats = self._cache_stats
            if status == CACHE_HIT:
                self._cache_stats = CacheStats(stats.hits + 1, stats.misses, stats.bypasses)
            elif status == CACHE_MISS:
                self._cache_stats = CacheStats(stats.hits, stats.misses + 1, stats.bypasses)
            elif status == CACHE_BYPASS:
                self._cache_stats = CacheStats(stats.hits, stats.misses, stats.bypasses + 1)
            else:
                raise ValueError(f"unknown cache status {status!r}")

    # -- Provider errors ----------------------------------------------------
    def record_provider_error(self, reason: str, increment: int = 1) -> None:
        if not reason:
            raise ValueError("reason must be provided")
        if increment <= 0:
            raise ValueError("increment must be positive")
        with self._lock:
            self._provider_errors[reason] = self._provider_errors.get(reason, 0) + increment

    # -- Snapshot -----------------------------------------------------------
    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            providers = dict(self._provider_errors)
            cache = self._cache_stats.as_dict()
        return {"providers": providers, "cache": cache}


__all__ = ["CacheStats", "HealthRegistry"]
