from __future__ import annotations

import asyncio
import time

import requests

from cityweather.core.providers.geocoding import OpenMeteoGeocoder
from cityweather.core.providers.openmeteo import OpenMeteoForecastClient
from cityweather.core.services.live import LiveWeatherLookup, LookupFailure, LookupSuccess


GEOCODING_URL = "https://geocoding.test/v1/search"
FORECAST_URL = "https://openmeteo.test/v1/forecast"

SHANGHAI = {
    "results": [
        {
            "name": "上海",
            "country": "中国",
            "country_code": "CN",
            "admin1": "上海",
            "latitude": 31.22222,
            "longitude": 121.45806,
            "timezone": "Asia/Shanghai",
        }
    ]
}


def make_lookup() -> LiveWeatherLookup:
    return LiveWeatherLookup(
        geocoder=OpenMeteoGeocoder(base_url=GEOCODING_URL),
        forecast_client=OpenMeteoForecastClient(base_url=FORECAST_URL),
    )


def test_successful_lookup_builds_snapshot(requests_mock) -> None:
    requests_mock.get(GEOCODING_URL, json=SHANGHAI)
    requests_mock.get(
        FORECAST_URL,
        json={
            "current": {
                "time": "2024-06-01T14:00",
                "temperature_2m": 27.4,
                "relative_humidity_2m": 77,
                "weather_code": 80,
            }
        },
    )

    result = asyncio.run(make_lookup().lookup("上海", timeout_ms=4000))

    assert isinstance(result, LookupSuccess)
    snapshot = result.snapshot
    assert snapshot.source == "open-meteo"
    assert snapshot.condition == "showers"
    assert snapshot.temperature_c == 27.4
    assert snapshot.humidity == 77
    assert snapshot.observed_at == "2024-06-01T14:00"
    assert snapshot.geocode is not None
    assert snapshot.geocode.timezone == "Asia/Shanghai"
    assert requests_mock.call_count == 2


def test_unknown_city_is_not_found(requests_mock) -> None:
    requests_mock.get(GEOCODING_URL, json={})

    result = asyncio.run(make_lookup().lookup("Atlantis", timeout_ms=4000))

    assert result == LookupFailure("not-found", "Atlantis")


def test_missing_forecast_values_is_a_failure(requests_mock) -> None:
    requests_mock.get(GEOCODING_URL, json=SHANGHAI)
    requests_mock.get(FORECAST_URL, json={"current": {"weather_code": 1}})

    result = asyncio.run(make_lookup().lookup("上海", timeout_ms=4000))

    assert isinstance(result, LookupFailure)
    assert result.reason == "no-forecast"


def test_network_error_becomes_failure(requests_mock) -> None:
    requests_mock.get(GEOCODING_URL, exc=requests.exceptions.ConnectionError("connection refused"))

    result = asyncio.run(make_lookup().lookup("上海", timeout_ms=4000))

    assert isinstance(result, LookupFailure)
    assert result.reason == "provider-error"


def test_request_timeout_becomes_failure(requests_mock) -> None:
    requests_mock.get(GEOCODING_URL, json=SHANGHAI)
    requests_mock.get(FORECAST_URL, exc=requests.exceptions.ReadTimeout("slow"))

    result = asyncio.run(make_lookup().lookup("上海", timeout_ms=4000))

    assert isinstance(result, LookupFailure)
    assert result.reason == "timeout"


def test_malformed_payload_becomes_failure(requests_mock) -> None:
    requests_mock.get(GEOCODING_URL, json={"results": [{"name": "上海", "latitude": "north"}]})

    result = asyncio.run(make_lookup().lookup("上海", timeout_ms=4000))

    assert isinstance(result, LookupFailure)
    assert result.reason == "malformed-response"


def test_overall_budget_cancels_slow_lookup() -> None:
    class SlowGeocoder(OpenMeteoGeocoder):
        def resolve(self, query, **kwargs):
            time.sleep(0.5)
            return None

    lookup = LiveWeatherLookup(geocoder=SlowGeocoder(), forecast_client=OpenMeteoForecastClient())

    result = asyncio.run(lookup.lookup("上海", timeout_ms=50))

    assert isinstance(result, LookupFailure)
    assert result.reason == "timeout"
