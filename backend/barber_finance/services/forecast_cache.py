"""Forecast cache: memoises serialised forecasts per (unit, account, horizon).

The cache is an optimisation only. Backend failures are logged and treated
as a miss (on read) or ignored (on write); they never fail the request.
"""

import json

import structlog

from barber_finance.core.cache import CacheBackend

logger = structlog.get_logger()

DEFAULT_TTL_SECONDS = 3600


class ForecastCache:
    def __init__(self, backend: CacheBackend, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.backend = backend
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def build_key(unit_id: str, account_id: str | None, days: int) -> str:
        return f"cashflow-forecast:{unit_id}:{account_id or 'all'}:{days}"

    async def get(self, key: str) -> dict | None:
        try:
            raw = await self.backend.get(key)
        except Exception as e:
            logger.warning("Forecast cache unavailable on read", key=key, error=str(e))
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.warning("Discarding unreadable forecast cache entry", key=key, error=str(e))
            return None

    async def set(self, key: str, value: dict) -> None:
        try:
            await self.backend.set(key, json.dumps(value), self.ttl_seconds)
        except Exception as e:
            logger.warning("Forecast cache unavailable on write", key=key, error=str(e))
