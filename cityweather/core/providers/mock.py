"""Deterministic synthetic weather used when no live data is available."""
from __future__ import annotations

import struct
from datetime import datetime, timezone
from typing import Callable

from ..abstractions import CLEAR, CLOUDY, FOG, LIGHT_RAIN, OVERCAST, SHOWERS, SOURCE_MOCK, WeatherSnapshot


FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
MOCK_CONDITIONS = (CLEAR, CLOUDY, OVERCAST, LIGHT_RAIN, SHOWERS, FOG)


def fnv1a_32(value: str) -> int:
    """32-bit FNV-1a over the UTF-16 code units of ``value``."""
    data = value.encode("utf-16-le", "surrogatepass")
    units = struct.unpack(f"<{len(data) // 2}H", data)
    result = FNV_OFFSET_BASIS
    for unit in units:
        result ^= unit
        result = (result * FNV_PRIME) & 0xFFFFFFFF
    return result


class MockWeatherGenerator:
    name = SOURCE_MOCK

    def __init__(self, now_func: Callable[[], datetime] = lambda: datetime.now(tz=timezone.utc)) -> None:
        self._now = now_func

    def generate(self, normalized_city: str) -> WeatherSnapshot:
        seed = fnv1a_32(normalized_city)
        return WeatherSnapshot(
            condition=MOCK_CONDITIONS[(seed >> 16) % len(MOCK_CONDITIONS)],
            temperature_c=float(8 + seed % 25),
            humidity=30 + (seed >> 8) % 56,
            source=SOURCE_MOCK,
            observed_at=self._observed_at(),
        )

    def _observed_at(self) -> str:
        return self._now().astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


__all__ = ["MOCK_CONDITIONS", "MockWeatherGenerator", "fnv1a_32"]
