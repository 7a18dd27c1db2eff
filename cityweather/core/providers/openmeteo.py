from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, TypeVar

from ..abstractions import (
    CLEAR,
    CLOUDY,
    LIGHT_RAIN,
    LIGHT_SNOW,
    OVERCAST,
    SHOWERS,
    SNOW_SHOWERS,
    UNKNOWN,
)
from .base import HttpProvider, ProviderError
from .schemas import ForecastResponse, HourlyBlock


FORECAST_VARIABLES = "temperature_2m,relative_humidity_2m,weather_code"

# Inclusive upper bounds, checked in ascending order
WEATHER_CODE_THRESHOLDS = (
    (0, CLEAR),
    (3, CLOUDY),
    (48, OVERCAST),
    (67, LIGHT_RAIN),
    (77, LIGHT_SNOW),
    (82, SHOWERS),
    (86, SNOW_SHOWERS),
)

T = TypeVar("T")


def map_weather_code(code: Optional[int]) -> str:
    if code is None:
        return UNKNOWN
    for upper_bound, label in WEATHER_CODE_THRESHOLDS:
        if code <= upper_bound:
            return label
    return UNKNOWN


@dataclass(frozen=True)
class ForecastReading:
    temperature_c: float
    humidity: float
    weather_code: Optional[int]
    observed_at: Optional[str]


def top_of_hour(now: datetime, utc_offset_seconds: Optional[int]) -> str:
    """Local ``YYYY-MM-DDTHH:00`` stamp in the format Open-Meteo uses for hourly slots."""
    local = now.astimezone(timezone.utc) + timedelta(seconds=utc_offset_seconds or 0)
    return local.strftime("%Y-%m-%dT%H:00")


def _safe_index(values: List[Optional[T]], index: int) -> Optional[T]:
    try:
        return values[index]
    except IndexError:
        return None


class OpenMeteoForecastClient(HttpProvider):
    name = "open-meteo"
    base_url = "https://api.open-meteo.com/v1/forecast"

    def __init__(
        self,
        base_url: Optional[str] = None,
        now_func: Callable[[], datetime] = lambda: datetime.now(tz=timezone.utc),
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.base_url = base_url or self.base_url
        self._now = now_func
        self._log = logging.getLogger(self.__class__.__name__)

    def fetch_forecast(
        self,
        latitude: float,
        longitude: float,
        timeout_ms: Optional[int] = None,
        *,
        debug_raw: bool = False,
    ) -> Optional[ForecastReading]:
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "current": FORECAST_VARIABLES,
            "hourly": FORECAST_VARIABLES,
            "timezone": "auto",
        }
        response = self._request("GET", self.base_url, params=params, timeout_ms=timeout_ms, debug_raw=debug_raw)
        data = self._json(response)
        if not isinstance(data, dict):
            raise ProviderError("unexpected forecast payload")
        return self.read_forecast(ForecastResponse.model_validate(data))

    def read_forecast(self, forecast: ForecastResponse) -> Optional[ForecastReading]:
        current = forecast.current
        if current is not None and current.temperature_2m is not None and current.relative_humidity_2m is not None:
            return ForecastReading(
                temperature_c=current.temperature_2m,
                humidity=current.relative_humidity_2m,
                weather_code=current.weather_code,
                observed_at=current.time,
            )

        hourly = forecast.hourly or HourlyBlock()
        if current is not None and current.time:
            wanted = current.time
        else:
            wanted = top_of_hour(self._now(), forecast.utc_offset_seconds)
        index = self._hourly_index(hourly, wanted)

        temperature = _safe_index(hourly.temperature_2m, index)
        humidity = _safe_index(hourly.relative_humidity_2m, index)
        if temperature is None or humidity is None:
            self._log.warning("Forecast has no temperature/humidity in current or hourly[%s]", index)
            return None

        weather_code = current.weather_code if current is not None else None
        if weather_code is None:
            weather_code = _safe_index(hourly.weather_code, index)
        observed_at = (current.time if current is not None else None) or _safe_index(hourly.time, index)
        return ForecastReading(
            temperature_c=temperature,
            humidity=humidity,
            weather_code=weather_code,
            observed_at=observed_at,
        )

    @staticmethod
    def _hourly_index(hourly: HourlyBlock, wanted: str) -> int:
        for idx, stamp in enumerate(hourly.time):
            if stamp == wanted:
                return idx
        return 0


__all__ = ["ForecastReading", "OpenMeteoForecastClient", "map_weather_code", "top_of_hour"]
