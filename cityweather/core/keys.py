"""City normalization and cache key construction."""
from __future__ import annotations

from typing import Optional


WEATHER_VERSION = "v1"
UNKNOWN_CITY = "未知"


def normalize_city(raw_city: Optional[str]) -> str:
    normalized = (raw_city or "").strip().lower()
    return normalized or UNKNOWN_CITY


def bucket_index(now_seconds: float, ttl_seconds: int) -> int:
    """Index of the wall-clock aligned window of ``ttl_seconds`` containing ``now``.

    Requests in the same window share a cache slot; two requests straddling a
    boundary land in different slots even when milliseconds apart.
    """
    return int(now_seconds * 1000) // (ttl_seconds * 1000)


def build_cache_key(provider: str, normalized_city: str, bucket: int) -> str:
    # bumping WEATHER_VERSION orphans every previously written key
    return f"weather:{WEATHER_VERSION}:{provider}:{normalized_city}:{bucket}"


__all__ = ["UNKNOWN_CITY", "WEATHER_VERSION", "bucket_index", "build_cache_key", "normalize_city"]
