"""Tests for RedisStore against a mocked redis.asyncio client."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError, TimeoutError as RedisTimeoutError

from runbot.configuration.app_configuration import RedisSettings
from runbot.database.store import RedisStore
from runbot.errors import StoreUnavailable


@pytest.fixture
def client():
    fake = MagicMock()
    for name in ("ping", "get", "exists", "set", "hget", "hgetall", "hset", "aclose"):
        setattr(fake, name, AsyncMock())
    return fake


@pytest.fixture
def store(client):
    return RedisStore(client)


def _scan_iter(*keys):
    async def scan_iter(match=None):
        for key in keys:
            yield key

    return MagicMock(side_effect=scan_iter)


class TestOperations:
    @pytest.mark.asyncio
    async def test_get_and_exists(self, store, client):
        client.get.return_value = "1"
        client.exists.return_value = 0

        assert await store.get("k") == "1"
        assert await store.exists("k") is False
        client.get.assert_awaited_once_with("k")

    @pytest.mark.asyncio
    async def test_hash_fields_are_sent_as_strings(self, store, client):
        client.hget.return_value = "70"

        await store.hset("k", 7, 70)
        assert await store.hget("k", 7) == "70"

        client.hset.assert_awaited_once_with("k", "7", 70)
        client.hget.assert_awaited_once_with("k", "7")

    @pytest.mark.asyncio
    async def test_hgetall_returns_pairs(self, store, client):
        client.hgetall.return_value = {"7": "70", "8": "80"}

        assert await store.hgetall("k") == [("7", "70"), ("8", "80")]

    @pytest.mark.asyncio
    async def test_scan_collects_every_match(self, store, client):
        client.scan_iter = _scan_iter("channel:1:2:auto", "channel:1:default:auto")

        keys = await store.scan("channel:1:*:auto")

        assert keys == ["channel:1:2:auto", "channel:1:default:auto"]
        client.scan_iter.assert_called_once_with(match="channel:1:*:auto")


class TestErrors:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [RedisConnectionError("refused"), RedisTimeoutError("timed out"), ResponseError("WRONGTYPE")],
    )
    async def test_redis_errors_become_store_unavailable(self, store, client, error):
        client.set.side_effect = error

        with pytest.raises(StoreUnavailable) as excinfo:
            await store.set("k", 1)

        assert excinfo.value.__cause__ is error
        client.set.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_scan_failure(self, store, client):
        async def broken(match=None):
            raise RedisConnectionError("gone")
            yield  # pragma: no cover

        client.scan_iter = MagicMock(side_effect=broken)

        with pytest.raises(StoreUnavailable):
            await store.scan("*")

    @pytest.mark.asyncio
    async def test_connect_pings(self, store, client):
        await store.connect()
        client.ping.assert_awaited_once()

        client.ping.side_effect = RedisConnectionError("refused")
        with pytest.raises(StoreUnavailable):
            await store.connect()

    @pytest.mark.asyncio
    async def test_close_logs_redis_errors(self, store, client):
        client.aclose.side_effect = RedisConnectionError("already closed")

        await store.close()

        client.aclose.assert_awaited_once()


def test_from_settings_sets_timeouts():
    settings = RedisSettings(url="redis://cache:6380/2", socket_timeout=1.5, socket_connect_timeout=2.5, max_connections=4)

    with patch("runbot.database.store.redis.Redis.from_url") as from_url:
        RedisStore.from_settings(settings)

    from_url.assert_called_once_with(
        "redis://cache:6380/2",
        decode_responses=True,
        socket_timeout=1.5,
        socket_connect_timeout=2.5,
        max_connections=4,
    )
