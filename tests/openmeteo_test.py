from __future__ import annotations

from datetime import datetime, timezone

import pytest

from cityweather.core.providers.base import ProviderError
from cityweather.core.providers.openmeteo import OpenMeteoForecastClient, map_weather_code, top_of_hour


FORECAST_URL = "https://openmeteo.test/v1/forecast"
FIXED_NOW = datetime(2024, 1, 10, 5, 42, tzinfo=timezone.utc)

HOURLY = {
    "time": ["2024-01-10T12:00", "2024-01-10T13:00", "2024-01-10T14:00"],
    "temperature_2m": [1.0, 2.5, 3.0],
    "relative_humidity_2m": [40, 45, 50],
    "weather_code": [0, 61, 3],
}


def make_client() -> OpenMeteoForecastClient:
    return OpenMeteoForecastClient(base_url=FORECAST_URL, now_func=lambda: FIXED_NOW)


@pytest.mark.parametrize(
    "code, label",
    [
        (0, "clear"),
        (1, "cloudy"),
        (3, "cloudy"),
        (45, "overcast"),
        (48, "overcast"),
        (51, "light-rain"),
        (67, "light-rain"),
        (71, "light-snow"),
        (77, "light-snow"),
        (80, "showers"),
        (82, "showers"),
        (85, "snow-showers"),
        (86, "snow-showers"),
        (95, "unknown"),
        (None, "unknown"),
    ],
)
def test_map_weather_code(code, label) -> None:
    assert map_weather_code(code) == label


def test_top_of_hour_uses_location_offset() -> None:
    assert top_of_hour(FIXED_NOW, 8 * 3600) == "2024-01-10T13:00"
    assert top_of_hour(FIXED_NOW, None) == "2024-01-10T05:00"


def test_reads_current_block(requests_mock) -> None:
    requests_mock.get(
        FORECAST_URL,
        json={
            "current": {
                "time": "2024-01-10T13:45",
                "temperature_2m": 4.2,
                "relative_humidity_2m": 63,
                "weather_code": 2,
            },
            "hourly": HOURLY,
        },
    )

    reading = make_client().fetch_forecast(31.2, 121.5, 4000)

    assert reading is not None
    assert reading.temperature_c == 4.2
    assert reading.humidity == 63
    assert reading.weather_code == 2
    assert reading.observed_at == "2024-01-10T13:45"
    request = requests_mock.last_request
    assert request.qs["current"] == ["temperature_2m,relative_humidity_2m,weather_code"]
    assert request.qs["hourly"] == ["temperature_2m,relative_humidity_2m,weather_code"]
    assert request.qs["timezone"] == ["auto"]
    assert request.timeout == 4.0


def test_falls_back_to_hourly_slot_matching_current_time(requests_mock) -> None:
    requests_mock.get(
        FORECAST_URL,
        json={
            "current": {"time": "2024-01-10T13:00", "weather_code": 61},
            "hourly": HOURLY,
        },
    )

    reading = make_client().fetch_forecast(31.2, 121.5)

    assert reading is not None
    assert reading.temperature_c == 2.5
    assert reading.humidity == 45
    assert reading.weather_code == 61
    assert reading.observed_at == "2024-01-10T13:00"


def test_falls_back_to_synthesized_hour_without_current(requests_mock) -> None:
    requests_mock.get(FORECAST_URL, json={"utc_offset_seconds": 28800, "hourly": HOURLY})

    reading = make_client().fetch_forecast(31.2, 121.5)

    assert reading is not None
    assert reading.temperature_c == 2.5
    assert reading.weather_code == 61
    assert reading.observed_at == "2024-01-10T13:00"


def test_defaults_to_first_hourly_slot(requests_mock) -> None:
    requests_mock.get(
        FORECAST_URL,
        json={"current": {"time": "2024-02-01T00:00"}, "hourly": HOURLY},
    )

    reading = make_client().fetch_forecast(31.2, 121.5)

    assert reading is not None
    assert reading.temperature_c == 1.0
    assert reading.humidity == 40
    assert reading.weather_code == 0


def test_returns_none_without_temperature_and_humidity(requests_mock) -> None:
    requests_mock.get(
        FORECAST_URL,
        json={
            "current": {"temperature_2m": 5.0},
            "hourly": {"time": ["2024-01-10T12:00"], "temperature_2m": [5.0], "relative_humidity_2m": [None]},
        },
    )

    assert make_client().fetch_forecast(31.2, 121.5) is None


def test_http_error_raises_provider_error(requests_mock) -> None:
    requests_mock.get(FORECAST_URL, status_code=502, text="bad gateway")

    with pytest.raises(ProviderError):
        make_client().fetch_forecast(31.2, 121.5)


def test_invalid_json_raises_provider_error(requests_mock) -> None:
    requests_mock.get(FORECAST_URL, text="<html>oops</html>")

    with pytest.raises(ProviderError):
        make_client().fetch_forecast(31.2, 121.5)
