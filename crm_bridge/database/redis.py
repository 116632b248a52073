"""
Lightweight in-memory RedisCache replacement for local development.

Implements the same get/put/has/flush_all interface as
crm_bridge.database.redis_real so the Salesforce adapter can run without a
real Redis instance. Values are stored as JSON text, exactly like the Redis
backend, so both behave the same for round-trips.
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable, Dict, Optional, Tuple


class RedisCache:
    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        # key -> (json payload, expires_at)
        self._entries: Dict[str, Tuple[str, float]] = {}
        self._clock = clock

    def _live_payload(self, key: str) -> Optional[str]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        payload, expires_at = entry
        if self._clock() >= expires_at:
            self._entries.pop(key, None)
            return None
        return payload

    def put(self, key: str, value: Any, ttl: int) -> None:
        if ttl <= 0:
            self._entries.pop(key, None)
            return
        payload = json.dumps(value, default=str)
        self._entries[key] = (payload, self._clock() + ttl)

    def get(self, key: str, default: Any = None) -> Any:
        """Stored value, or ``default`` when the key is missing or expired."""
        payload = self._live_payload(key)
        if payload is None:
            return default
        return json.loads(payload)

    def has(self, key: str) -> bool:
        return self._live_payload(key) is not None

    def flush_all(self) -> None:
        self._entries.clear()

    def ping(self) -> bool:
        return True
