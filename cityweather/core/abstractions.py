"""Core abstractions for the weather domain."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Protocol


CLEAR = "clear"
CLOUDY = "cloudy"
OVERCAST = "overcast"
LIGHT_RAIN = "light-rain"
LIGHT_SNOW = "light-snow"
SHOWERS = "showers"
SNOW_SHOWERS = "snow-showers"
FOG = "fog"
UNKNOWN = "unknown"

CONDITIONS = (CLEAR, CLOUDY, OVERCAST, LIGHT_RAIN, LIGHT_SNOW, SHOWERS, SNOW_SHOWERS, FOG, UNKNOWN)

SOURCE_OPEN_METEO = "open-meteo"
SOURCE_MOCK = "mock"

CACHE_HIT = "hit"
CACHE_MISS = "miss"
CACHE_BYPASS = "bypass"


@dataclass(frozen=True)
class GeoLocation:
    """Resolved location metadata attached to live snapshots."""

    name: str
    latitude: float
    longitude: float
    country: Optional[str] = None
    admin1: Optional[str] = None
    timezone: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "country": self.country,
            "admin1": self.admin1,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timezone": self.timezone,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GeoLocation":
        return cls(
            name=payload["name"],
            latitude=float(payload["latitude"]),
            longitude=float(payload["longitude"]),
            country=payload.get("country"),
            admin1=payload.get("admin1"),
            timezone=payload.get("timezone"),
        )


@dataclass(frozen=True)
class WeatherSnapshot:
    """Normalized weather result handed to callers.

    ``cache_key``, ``cache_status`` and ``normalized_city`` describe the call
    that produced the value and are filled in by the resolver; they are not
    part of the cached payload.
    """

    condition: str
    temperature_c: float
    humidity: int
    source: str
    observed_at: Optional[str] = None
    cache_key: Optional[str] = None
    cache_status: Optional[str] = None
    normalized_city: Optional[str] = None
    geocode: Optional[GeoLocation] = None

    def with_context(self, *, cache_key: str, normalized_city: str, cache_status: str) -> "WeatherSnapshot":
        return replace(self, cache_key=cache_key, normalized_city=normalized_city, cache_status=cache_status)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "condition": self.condition,
            "temperatureC": self.temperature_c,
            "humidity": self.humidity,
            "source": self.source,
            "observedAt": self.observed_at,
            "cacheKey": self.cache_key,
            "cacheStatus": self.cache_status,
            "normalizedCity": self.normalized_city,
        }
        if self.geocode is not None:
            payload["geocode"] = self.geocode.to_dict()
        return payload

    def to_cache_payload(self) -> Dict[str, Any]:
        """Serialized form stored in the cache, without call context."""
        payload = self.to_dict()
        for key in ("cacheKey", "cacheStatus", "normalizedCity"):
            payload.pop(key, None)
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "WeatherSnapshot":
        if not isinstance(payload, dict):
            raise TypeError(f"snapshot payload must be an object, got {type(payload).__name__}")
        geocode = payload.get("geocode")
        return cls(
            condition=payload["condition"],
            temperature_c=float(payload["temperatureC"]),
            humidity=int(payload["humidity"]),
            source=payload["source"],
            observed_at=payload.get("observedAt"),
            cache_key=payload.get("cacheKey"),
            cache_status=payload.get("cacheStatus"),
            normalized_city=payload.get("normalizedCity"),
            geocode=GeoLocation.from_dict(geocode) if geocode else None,
        )


class SnapshotCache(Protocol):
    """Key/value capability the resolver reads and writes snapshots through."""

    async def get(self, key: str) -> Optional[str]:
        """Return the serialized snapshot stored under ``key``, if any."""
        ...

    async def put(self, key: str, payload: str, ttl_seconds: int) -> None:
        """Store ``payload`` under ``key`` with a TTL hint."""
        ...


__all__ = [
    "CACHE_BYPASS",
    "CACHE_HIT",
    "CACHE_MISS",
    "CONDITIONS",
    "GeoLocation",
    "SOURCE_MOCK",
    "SOURCE_OPEN_METEO",
    "SnapshotCache",
    "WeatherSnapshot",
]
