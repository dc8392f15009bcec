"""Key-value cache backends.

Values are stored as strings (callers serialise to JSON), so a cached value is
always a copy of what was written. Redis is the production backend; the
in-memory backend serves development and tests.
"""

import time
from abc import ABC, abstractmethod

import redis.asyncio as redis
import structlog

from barber_finance.config import settings

logger = structlog.get_logger()


class CacheBackend(ABC):
    """Abstract string cache with per-key TTL."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Return the stored value, or None when absent or expired."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value that expires after ``ttl_seconds``."""

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class MemoryCacheBackend(CacheBackend):
    """In-process cache with TTL support and size limit."""

    MAX_ENTRIES = 10000

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self._values: dict[str, str] = {}
        self._expiry: dict[str, float] = {}

    def _evict_expired(self) -> None:
        now = self._clock()
        expired = [k for k, exp in self._expiry.items() if exp <= now]
        for k in expired:
            self._values.pop(k, None)
            self._expiry.pop(k, None)

    async def get(self, key: str) -> str | None:
        if key not in self._values:
            return None
        if self._clock() < self._expiry[key]:
            return self._values[key]
        # Expired
        del self._values[key]
        del self._expiry[key]
        return None

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        if len(self._values) >= self.MAX_ENTRIES:
            self._evict_expired()
        # Still full: drop the entries closest to expiry
        if len(self._values) >= self.MAX_ENTRIES:
            for k in sorted(self._expiry, key=self._expiry.get)[:100]:
                self._values.pop(k, None)
                self._expiry.pop(k, None)
        self._values[key] = value
        self._expiry[key] = self._clock() + ttl_seconds

    def clear(self) -> None:
        self._values.clear()
        self._expiry.clear()


class RedisCacheBackend(CacheBackend):
    """Redis-backed cache (``SET key value EX ttl``)."""

    def __init__(self, url: str):
        self._redis = redis.from_url(url, socket_connect_timeout=2, decode_responses=True)

    async def get(self, key: str) -> str | None:
        return await self._redis.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._redis.set(key, value, ex=ttl_seconds)

    async def ping(self) -> bool:
        return bool(await self._redis.ping())

    async def close(self) -> None:
        await self._redis.aclose()


# ── Process-wide backend ──────────────────────────
_backend: CacheBackend | None = None


def build_cache_backend() -> CacheBackend:
    if settings.cache_backend == "memory":
        return MemoryCacheBackend()
    return RedisCacheBackend(settings.redis_url)


def get_cache_backend() -> CacheBackend:
    """Return the shared backend, creating it on first use."""
    global _backend
    if _backend is None:
        _backend = build_cache_backend()
        logger.info("Cache backend initialised", backend=settings.cache_backend)
    return _backend


async def close_cache_backend() -> None:
    global _backend
    if _backend is not None:
        await _backend.close()
        _backend = None
