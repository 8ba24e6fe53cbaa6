"""
Key-value cache with per-entry TTL.

Backs the soft-revocation entry ``user_token:{id}`` and the todo read caches.
Deletion is always by exact key. Failures propagate; there is no retry and no
fallback from Redis to memory.
"""
from __future__ import annotations

import json
import logging
import time
from functools import lru_cache
from threading import Lock
from typing import Any, Dict, Optional, Protocol, Tuple

import redis

from todo_api.core.config import get_settings

logger = logging.getLogger(__name__)


class Cache(Protocol):
    def set(self, key: str, value: Any, ttl_ms: int) -> None: ...

    def get(self, key: str) -> Optional[Any]: ...

    def delete(self, key: str) -> None: ...

    def hit(self, key: str, window_ms: int) -> int: ...

    def close(self) -> None: ...


class RedisCache:
    """Redis backend. Values are stored JSON-encoded."""

    def __init__(self, client: redis.Redis) -> None:
        self._redis = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        logger.info("Redis cache: %s", url.split("@")[-1])
        return cls(
            redis.Redis.from_url(
                url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
        )

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        self._redis.psetex(key, int(ttl_ms), json.dumps(value))

    def get(self, key: str) -> Optional[Any]:
        raw = self._redis.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def delete(self, key: str) -> None:
        self._redis.delete(key)

    def hit(self, key: str, window_ms: int) -> int:
        pipe = self._redis.pipeline()
        pipe.incr(key)
        pipe.pexpire(key, int(window_ms), nx=True)
        count, _ = pipe.execute()
        return int(count)

    def close(self) -> None:
        self._redis.close()


class MemoryCache:
    """In-process backend for tests and single-process local runs."""

    def __init__(self, clock=time.monotonic) -> None:
        self._clock = clock
        self._data: Dict[str, Tuple[float, str]] = {}
        self._lock = Lock()

    def _live(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at, raw = entry
        if self._clock() >= expires_at:
            del self._data[key]
            return None
        return raw

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        with self._lock:
            self._data[key] = (self._clock() + ttl_ms / 1000.0, json.dumps(value))

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            raw = self._live(key)
        return None if raw is None else json.loads(raw)

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def hit(self, key: str, window_ms: int) -> int:
        with self._lock:
            raw = self._live(key)
            if raw is None:
                count = 1
                expires_at = self._clock() + window_ms / 1000.0
            else:
                count = json.loads(raw) + 1
                expires_at = self._data[key][0]
            self._data[key] = (expires_at, json.dumps(count))
            return count

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def close(self) -> None:
        # 프로세스 메모리만 쓰므로 비우는 것으로 충분
        self.clear()


@lru_cache
def get_cache() -> Cache:
    """FastAPI Depends(get_cache). One backend per process."""
    settings = get_settings()
    if settings.cache_backend == "memory":
        logger.info("Using in-memory cache backend")
        return MemoryCache()
    return RedisCache.from_url(settings.redis_url)
