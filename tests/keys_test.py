from __future__ import annotations

import pytest

from cityweather.core.keys import UNKNOWN_CITY, WEATHER_VERSION, bucket_index, build_cache_key, normalize_city


@pytest.mark.parametrize("raw", ["  Shanghai ", "BEIJING", "\tsuzhou\n", "北京", "", None, "  "])
def test_normalize_is_idempotent(raw) -> None:
    once = normalize_city(raw)
    assert normalize_city(once) == once


def test_normalize_trims_and_lowercases() -> None:
    assert normalize_city("  Shanghai ") == "shanghai"


def test_normalize_uses_placeholder_for_missing_city() -> None:
    assert normalize_city("") == UNKNOWN_CITY
    assert normalize_city(None) == UNKNOWN_CITY


@pytest.mark.parametrize("raw", ["  ", "\t\n", "\u3000"])
def test_normalize_uses_placeholder_for_blank_city(raw) -> None:
    assert normalize_city(raw) == UNKNOWN_CITY


def test_cache_key_format() -> None:
    key = build_cache_key("open-meteo", "beijing", 2845123)
    assert key == f"weather:{WEATHER_VERSION}:open-meteo:beijing:2845123"


def test_cache_key_is_deterministic() -> None:
    assert build_cache_key("mock", "shanghai", 7) == build_cache_key("mock", "shanghai", 7)


@pytest.mark.parametrize(
    "other",
    [
        ("open-meteo", "shanghai", 7),
        ("mock", "beijing", 7),
        ("mock", "shanghai", 8),
    ],
)
def test_cache_key_changes_with_each_field(other) -> None:
    assert build_cache_key(*other) != build_cache_key("mock", "shanghai", 7)


def test_bucket_is_shared_within_window() -> None:
    assert bucket_index(6000.0, 600) == bucket_index(6599.998, 600) == 10


def test_bucket_boundary_splits_close_requests() -> None:
    assert bucket_index(5999.999, 600) == 9
    assert bucket_index(6000.001, 600) == 10
