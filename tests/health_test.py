import pytest

from cityweather.core.health import HealthRegistry


@pytest.fixture()
def registry() -> HealthRegistry:
    registry = HealthRegistry()
    registry.record_provider_error("timeout")
    registry.record_provider_error("not-found", increment=3)
    for status in ("hit", "hit", "miss", "bypass"):
        registry.record_cache_status(status)
    return registry


def test_snapshot_contains_counters(registry: HealthRegistry) -> None:
    assert registry.snapshot() == {
        "providers": {"timeout": 1, "not-found": 3},
        "cache": {"hits": 2, "misses": 1, "bypasses": 1},
    }


def test_snapshot_does_not_reset_counters(registry: HealthRegistry) -> None:
    first = registry.snapshot()
    first["providers"]["timeout"] = 99
    registry.record_provider_error("timeout")
    assert registry.snapshot()["providers"] == {"timeout": 2, "not-found": 3}


@pytest.mark.parametrize("reason, increment", [("", 1), ("timeout", 0)])
def test_invalid_provider_error_is_rejected(registry: HealthRegistry, reason, increment) -> None:
    with pytest.raises(ValueError):
        registry.record_provider_error(reason, increment=increment)


def test_unknown_cache_status_is_rejected(registry: HealthRegistry) -> None:
    with pytest.raises(ValueError):
        registry.record_cache_status("stale")
