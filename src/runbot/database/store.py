"""
Key-value store adapter for runbot settings.

``KeyValueStore`` is the narrow interface the settings resolver depends on;
``RedisStore`` implements it on top of ``redis.asyncio``.

Design notes
------------
* One pooled client is shared by every command handler. Commands never
  overlap on a single socket; the pool hands each one its own connection.
* Every operation is a single round-trip. Nothing is retried here: any
  ``RedisError`` (refused connection, timeout, protocol error) is raised as
  ``StoreUnavailable`` and the caller decides what to do.
* Socket timeouts are always set, so a stalled backend fails the command
  instead of blocking it forever.

Usage
-----
    store = RedisStore.from_settings(app_config.redis_settings)
    await store.connect()
    await store.set("channel:1:2:auto", 1)
    await store.close()
"""

from __future__ import annotations

from typing import Any, List, Optional, Protocol, Tuple, Union

import redis.asyncio as redis
from redis.exceptions import RedisError

from runbot.configuration.app_configuration import RedisSettings
from runbot.errors import StoreUnavailable
from runbot.util.logger import get_logger

logger = get_logger("store")

Value = Union[str, int]


class KeyValueStore(Protocol):
    """Operations the settings layer needs from its backend."""

    async def get(self, key: str) -> Optional[str]: ...

    async def exists(self, key: str) -> bool: ...

    async def set(self, key: str, value: Value) -> None: ...

    async def hget(self, key: str, field: Value) -> Optional[str]: ...

    async def hgetall(self, key: str) -> List[Tuple[str, str]]: ...

    async def hset(self, key: str, field: Value, value: Value) -> None: ...

    async def scan(self, pattern: str) -> List[str]: ...


class RedisStore:
    """``KeyValueStore`` backed by a pooled ``redis.asyncio.Redis`` client."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: RedisSettings) -> "RedisStore":
        client = redis.Redis.from_url(
            settings.url,
            decode_responses=True,
            socket_timeout=settings.socket_timeout,
            socket_connect_timeout=settings.socket_connect_timeout,
            max_connections=settings.max_connections,
        )
        return cls(client)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Check that the backend answers. Call once at startup."""
        await self._call("ping", self._client.ping())
        logger.info("[STORE] Connected to Redis")

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except RedisError:
            logger.exception("[STORE] Error while closing the Redis client")
        else:
            logger.info("[STORE] Redis client closed")

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def _call(self, operation: str, awaitable) -> Any:
        try:
            return await awaitable
        except RedisError as exc:
            logger.error("[STORE] %s failed: %s", operation, exc)
            raise StoreUnavailable(f"{operation} failed: {exc}") from exc

    async def get(self, key: str) -> Optional[str]:
        return await self._call("GET", self._client.get(key))

    async def exists(self, key: str) -> bool:
        return bool(await self._call("EXISTS", self._client.exists(key)))

    async def set(self, key: str, value: Value) -> None:
        await self._call("SET", self._client.set(key, value))
        logger.debug("[STORE] SET %s", key)

    async def hget(self, key: str, field: Value) -> Optional[str]:
        return await self._call("HGET", self._client.hget(key, str(field)))

    async def hgetall(self, key: str) -> List[Tuple[str, str]]:
        mapping = await self._call("HGETALL", self._client.hgetall(key))
        return list(mapping.items())

    async def hset(self, key: str, field: Value, value: Value) -> None:
        await self._call("HSET", self._client.hset(key, str(field), value))
        logger.debug("[STORE] HSET %s %s", key, field)

    async def scan(self, pattern: str) -> List[str]:
        return await self._call("SCAN", self._collect(pattern))

    async def _collect(self, pattern: str) -> List[str]:
        return [key async for key in self._client.scan_iter(match=pattern)]
