"""
Real Redis-backed cache for production when REDIS_URL is set. Implements the
same interface as crm_bridge.database.redis (in-memory stub).

flush_all() issues FLUSHDB: every key in the selected Redis database is
removed, not only the keys written by the Salesforce adapter.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import redis

logger = logging.getLogger(__name__)


class RedisCache:
    """
    Redis-backed cache for Salesforce reference data. Use when REDIS_URL is set.
    """

    def __init__(self, url: str, client: Optional[redis.Redis] = None) -> None:
        self._client = client or redis.from_url(url, decode_responses=True)

    def put(self, key: str, value: Any, ttl: int) -> None:
        if ttl <= 0:
            # SETEX rejects non-positive expiry; an expired entry is just absent.
            self._client.delete(key)
            return
        payload = json.dumps(value, default=str)
        self._client.setex(key, ttl, payload)

    def get(self, key: str, default: Any = None) -> Any:
        raw = self._client.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.error("Discarding undecodable cache entry %s", key)
            return default

    def has(self, key: str) -> bool:
        return bool(self._client.exists(key))

    def flush_all(self) -> None:
        self._client.flushdb()

    def ping(self) -> bool:
        try:
            return self._client.ping()
        except Exception:
            return False
