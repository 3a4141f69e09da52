"""Key-value storage for local client state, backed by Redis with in-memory fallback."""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Protocol

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class KeyValueStorage(Protocol):
    async def get_item(self, key: str) -> str | None:
        ...

    async def set_item(self, key: str, value: str) -> None:
        ...

    async def remove_item(self, key: str) -> None:
        ...


class RedisKeyValueStorage:
    """String values under namespaced keys.

    Without REDIS_URL, or after the first Redis failure, values live in
    process memory. Callers never see Redis errors.
    """

    KEY_PREFIX = "resto:"
    CONNECT_TIMEOUT_SECONDS = 5

    def __init__(self, redis_url: str | None = None, ttl_seconds: int | None = None):
        self._redis_url = redis_url
        self._ttl_seconds = ttl_seconds
        self._client = self._init_client()
        self._memory: dict[str, str] = {}
        self._memory_written_at: dict[str, float] = {}

    def _init_client(self):
        if not self._redis_url:
            logger.warning("REDIS_URL is not set; local storage uses in-memory fallback")
            return None
        try:
            client = aioredis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=self.CONNECT_TIMEOUT_SECONDS,
                socket_timeout=self.CONNECT_TIMEOUT_SECONDS,
            )
        except Exception as exc:
            logger.warning("Redis storage init failed, fallback to in-memory: %s", exc)
            return None
        logger.info("Redis local storage enabled")
        return client

    @property
    def uses_redis(self) -> bool:
        return self._client is not None

    def _switch_to_memory_fallback(self, reason: Exception | str) -> None:
        logger.warning("Redis storage fallback to memory mode: %s", reason)
        self._client = None

    def _key(self, key: str) -> str:
        return f"{self.KEY_PREFIX}{key}"

    def _memory_expired(self, key: str) -> bool:
        if not self._ttl_seconds:
            return False
        written_at = self._memory_written_at.get(key)
        return written_at is not None and time.time() - written_at > self._ttl_seconds

    async def get_item(self, key: str) -> str | None:
        if self._client:
            try:
                return await self._client.get(self._key(key))
            except Exception as exc:
                self._switch_to_memory_fallback(exc)
        if self._memory_expired(key):
            self._memory.pop(key, None)
            self._memory_written_at.pop(key, None)
        return self._memory.get(key)

    async def set_item(self, key: str, value: str) -> None:
        if self._client:
            try:
                if self._ttl_seconds:
                    await self._client.setex(self._key(key), self._ttl_seconds, value)
                else:
                    await self._client.set(self._key(key), value)
                return
            except Exception as exc:
                self._switch_to_memory_fallback(exc)
        self._memory[key] = value
        self._memory_written_at[key] = time.time()

    async def remove_item(self, key: str) -> None:
        if self._client:
            try:
                await self._client.delete(self._key(key))
                return
            except Exception as exc:
                self._switch_to_memory_fallback(exc)
        self._memory.pop(key, None)
        self._memory_written_at.pop(key, None)

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()


async def load_json(storage: KeyValueStorage, key: str) -> Any | None:
    """Read a JSON blob; unreadable data counts as missing."""
    raw = await storage.get_item(key)
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError) as exc:
        logger.warning("Discarding unreadable value under %s: %s", key, exc)
        return None


async def save_json(storage: KeyValueStorage, key: str, value: Any) -> None:
    await storage.set_item(key, json.dumps(value, ensure_ascii=False))
