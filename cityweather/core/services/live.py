"""Live geocode + forecast lookup with an explicit success/failure result."""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional, Union

from pydantic import ValidationError

from ..abstractions import SOURCE_OPEN_METEO, GeoLocation, WeatherSnapshot
from ..providers.base import ProviderError, ProviderTimeout
from ..providers.geocoding import OpenMeteoGeocoder
from ..providers.openmeteo import OpenMeteoForecastClient, map_weather_code


logger = logging.getLogger(__name__)

NOT_FOUND = "not-found"
NO_FORECAST = "no-forecast"
TIMEOUT = "timeout"
PROVIDER_ERROR = "provider-error"
MALFORMED = "malformed-response"
UNEXPECTED = "unexpected-error"


@dataclass(frozen=True)
class LookupSuccess:
    snapshot: WeatherSnapshot


@dataclass(frozen=True)
class LookupFailure:
    reason: str
    detail: str = ""


LookupResult = Union[LookupSuccess, LookupFailure]


class LiveWeatherLookup:
    """Geocode a city and read its forecast within one time budget."""

    def __init__(
        self,
        geocoder: Optional[OpenMeteoGeocoder] = None,
        forecast_client: Optional[OpenMeteoForecastClient] = None,
    ) -> None:
        self.geocoder = geocoder or OpenMeteoGeocoder()
        self.forecast_client = forecast_client or OpenMeteoForecastClient()
        self._log = logging.getLogger(self.__class__.__name__)

    async def lookup(self, city: str, *, timeout_ms: int, debug_raw: bool = False) -> LookupResult:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._lookup_blocking, city, timeout_ms, debug_raw),
                timeout=timeout_ms / 1000,
            )
        except (asyncio.TimeoutError, ProviderTimeout):
            return LookupFailure(TIMEOUT, f"no answer within {timeout_ms}ms")
        except ProviderError as exc:
            return LookupFailure(PROVIDER_ERROR, str(exc))
        except ValidationError as exc:
            return LookupFailure(MALFORMED, str(exc))
        except Exception as exc:  # noqa: BLE001 - callers rely on a result, never an exception
            self._log.error("Live lookup for %r failed unexpectedly", city, exc_info=exc)
            return LookupFailure(UNEXPECTED, repr(exc))

    def _lookup_blocking(self, city: str, timeout_ms: int, debug_raw: bool) -> LookupResult:
        deadline = time.monotonic() + timeout_ms / 1000
        candidate = self.geocoder.resolve(city, timeout_ms=timeout_ms, debug_raw=debug_raw)
        if candidate is None:
            return LookupFailure(NOT_FOUND, city)

        remaining_ms = int((deadline - time.monotonic()) * 1000)
        if remaining_ms <= 0:
            raise ProviderTimeout("budget exhausted after geocoding")
        reading = self.forecast_client.fetch_forecast(
            candidate.latitude, candidate.longitude, remaining_ms, debug_raw=debug_raw
        )
        if reading is None:
            return LookupFailure(NO_FORECAST, f"{candidate.latitude},{candidate.longitude}")

        location = GeoLocation(
            name=candidate.name or city,
            latitude=candidate.latitude,
            longitude=candidate.longitude,
            country=candidate.country,
            admin1=candidate.admin1,
            timezone=candidate.timezone,
        )
        return LookupSuccess(
            WeatherSnapshot(
                condition=map_weather_code(reading.weather_code),
                temperature_c=reading.temperature_c,
                humidity=int(round(reading.humidity)),
                source=SOURCE_OPEN_METEO,
                observed_at=reading.observed_at,
                geocode=location,
            )
        )


__all__ = ["LiveWeatherLookup", "LookupFailure", "LookupResult", "LookupSuccess"]
