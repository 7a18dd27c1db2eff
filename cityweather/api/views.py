"""REST API views for city weather snapshots."""
from __future__ import annotations

import logging
from datetime import datetime
from functools import lru_cache

from asgiref.sync import async_to_sync
from django.conf import settings
from django.core.cache import caches
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from cityweather.core.cache import DjangoSnapshotCache
from cityweather.core.config import DEFAULT_TIMEOUT_MS, DEFAULT_TTL_SECONDS, WeatherConfig
from cityweather.core.health import HealthRegistry
from cityweather.core.services.weather_service import WeatherResolver


logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_health_registry() -> HealthRegistry:
    return HealthRegistry()


@lru_cache(maxsize=1)
def get_weather_resolver() -> WeatherResolver:
    cache_backend = caches[settings.WEATHER_CACHE_ALIAS]
    return WeatherResolver(cache=DjangoSnapshotCache(cache_backend), health=get_health_registry())


def current_config() -> WeatherConfig:
    return WeatherConfig.from_env(settings.WEATHER)


class WeatherView(APIView):
    """Return the weather snapshot for a city."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):  # noqa: D401
        city = (request.query_params.get("city") or "").strip()
        if not city:
            return Response({"detail": "city query parameter is required"}, status=status.HTTP_400_BAD_REQUEST)

        snapshot = async_to_sync(get_weather_resolver().get_weather_by_city)(city, current_config())
        return Response(snapshot.to_dict(), status=status.HTTP_200_OK)


class HealthView(APIView):
    """Report configuration and probe the resolver with a known city."""

    permission_classes = [AllowAny]

    def get(self, request, *args, **kwargs):  # noqa: D401
        raw = settings.WEATHER
        probe_city = settings.HEALTH_WEATHER_PROBE_CITY
        try:
            snapshot = async_to_sync(get_weather_resolver().get_weather_by_city)(probe_city, current_config())
            probe_source = snapshot.source
        except Exception as exc:  # noqa: BLE001 - health must answer even if the probe breaks
            logger.error("Weather probe for %r failed", probe_city, exc_info=exc)
            probe_source = "unknown"

        payload = {
            "ok": True,
            "ts": datetime.now(tz=settings.DEFAULT_TIMEZONE).isoformat().replace("+00:00", "Z"),
            "weatherProvider": raw.get("WEATHER_PROVIDER", "auto"),
            "weatherCacheTtlSeconds": str(raw.get("WEATHER_CACHE_TTL_SECONDS", DEFAULT_TTL_SECONDS)),
            "weatherTimeoutMs": str(raw.get("WEATHER_TIMEOUT_MS", DEFAULT_TIMEOUT_MS)),
            "weatherProbeCity": probe_city,
            "weatherProbeSource": probe_source,
            "stats": get_health_registry().snapshot(),
        }
        return Response(payload, status=status.HTTP_200_OK)
