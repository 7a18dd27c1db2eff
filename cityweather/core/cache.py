from __future__ import annotations

import json
import logging
import time
from typing import Any, Dict, Optional, Tuple

from django.core.cache.backends.base import BaseCache


logger = logging.getLogger(__name__)


def cache_headers(ttl_seconds: int) -> Dict[str, str]:
    return {
        "content-type": "application/json",
        "cache-control": f"public, max-age={ttl_seconds}",
    }


class InMemorySnapshotCache:
    """A lightweight process-local TTL cache emulating the shared store."""

    def __init__(self, time_func=time.monotonic) -> None:
        self._time_func = time_func
        self._storage: Dict[str, Tuple[float, str, Dict[str, str]]] = {}
        self.get_calls = 0
        self.put_calls = 0

    async def get(self, key: str) -> Optional[str]:
        self.get_calls += 1
        item = self._storage.get(key)
        if not item:
            return None
        expires_at, payload, _headers = item
        if expires_at < self._time_func():
            self._storage.pop(key, None)
            return None
        return payload

    async def put(self, key: str, payload: str, ttl_seconds: int) -> None:
        self.put_calls += 1
        now = self._time_func()
        self._purge_expired(now)
        self._storage[key] = (now + ttl_seconds, payload, cache_headers(ttl_seconds))

    def _purge_expired(self, now: float) -> None:
        # keys embed the TTL bucket, so expired slots are never read again
        expired = [key for key, (expires_at, _payload, _headers) in self._storage.items() if expires_at < now]
        for key in expired:
            del self._storage[key]

    def headers(self, key: str) -> Optional[Dict[str, str]]:
        item = self._storage.get(key)
        return dict(item[2]) if item else None

    def clear(self) -> None:
        self._storage.clear()

    def __len__(self) -> int:
        return len(self._storage)


class DjangoSnapshotCache:
    """Store snapshots in a configured Django cache backend.

    Entries are kept as ``{"body": <json>, "headers": {...}}`` so the TTL hint
    travels with the payload as a cache-control directive.
    """

    def __init__(self, backend: BaseCache) -> None:
        self._backend = backend

    async def get(self, key: str) -> Optional[str]:
        entry: Any = await self._backend.aget(key)
        if entry is None:
            return None
        if isinstance(entry, dict):
            return entry.get("body")
        logger.warning("Unexpected cache entry type for %s: %s", key, type(entry).__name__)
        return None

    async def put(self, key: str, payload: str, ttl_seconds: int) -> None:
        entry = {"body": payload, "headers": cache_headers(ttl_seconds)}
        await self._backend.aset(key, entry, timeout=ttl_seconds)


def dump_snapshot_payload(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, sort_keys=True)


__all__ = ["DjangoSnapshotCache", "InMemorySnapshotCache", "cache_headers", "dump_snapshot_payload"]
