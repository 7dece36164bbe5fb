"""Test the cache stores and the read-through cache."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from shopally.services.read_through_cache import ReadThroughCache
from shopally.services.redis_service import RedisService
from shopally.utils import CacheStoreError


@pytest.fixture
def mock_redis():
    redis_client = AsyncMock()
    redis_client.get = AsyncMock(return_value=None)
    redis_client.set = AsyncMock(return_value=True)
    redis_client.incr = AsyncMock(return_value=1)
    redis_client.expire = AsyncMock(return_value=True)
    return redis_client


@pytest.fixture
def redis_service(mock_redis):
    return RedisService(redis_client=mock_redis, prefix="shopally:")


# --- In-memory store ---


@pytest.mark.asyncio
async def test_memory_store_get_miss(memory_store):
    assert await memory_store.get("missing") == (None, False)


@pytest.mark.asyncio
async def test_memory_store_set_and_expire(memory_store, clock):
    await memory_store.set("fx:USD:ETB", "56.5", ttl=10)
    assert await memory_store.get("fx:USD:ETB") == ("56.5", True)

    clock.advance(10)
    assert await memory_store.get("fx:USD:ETB") == (None, False)


@pytest.mark.asyncio
async def test_memory_store_zero_ttl_never_expires(memory_store, clock):
    await memory_store.set("key", "value", ttl=0)
    clock.advance(10_000)
    assert await memory_store.get("key") == ("value", True)


@pytest.mark.asyncio
async def test_memory_store_incr_keeps_ttl(memory_store, clock):
    assert await memory_store.incr("rate:d") == 1
    assert await memory_store.expire("rate:d", 60)

    clock.advance(30)
    assert await memory_store.incr("rate:d") == 2

    clock.advance(30)
    assert await memory_store.incr("rate:d") == 1


@pytest.mark.asyncio
async def test_memory_store_expire_missing_key(memory_store):
    assert await memory_store.expire("missing", 60) is False


# --- Redis store ---


@pytest.mark.asyncio
async def test_redis_get_hit_and_miss(redis_service, mock_redis):
    mock_redis.get.return_value = "56.5"
    assert await redis_service.get("fx:USD:ETB") == ("56.5", True)
    mock_redis.get.assert_awaited_with("shopally:fx:USD:ETB")

    mock_redis.get.return_value = None
    assert await redis_service.get("fx:USD:ETB") == (None, False)


@pytest.mark.asyncio
async def test_redis_set_with_ttl(redis_service, mock_redis):
    await redis_service.set("fx:USD:ETB", "56.5", ttl=3600)
    mock_redis.set.assert_awaited_once_with("shopally:fx:USD:ETB", "56.5", ex=3600)


@pytest.mark.asyncio
async def test_redis_set_without_ttl(redis_service, mock_redis):
    await redis_service.set("key", "value", ttl=0)
    mock_redis.set.assert_awaited_once_with("shopally:key", "value")


@pytest.mark.asyncio
async def test_redis_incr_and_expire(redis_service, mock_redis):
    mock_redis.incr.return_value = 3
    assert await redis_service.incr("rate:d") == 3
    assert await redis_service.expire("rate:d", 60) is True
    mock_redis.expire.assert_awaited_once_with("shopally:rate:d", 60)


@pytest.mark.asyncio
@pytest.mark.parametrize("operation,args", [("get", ("k",)), ("set", ("k", "v", 10)), ("incr", ("k",)), ("expire", ("k", 10))])
async def test_redis_errors_become_cache_store_errors(redis_service, mock_redis, operation, args):
    getattr(mock_redis, operation).side_effect = RedisConnectionError("connection refused")

    with pytest.raises(CacheStoreError) as exc_info:
        await getattr(redis_service, operation)(*args)

    assert exc_info.value.key == "k"


@pytest.mark.asyncio
async def test_redis_close(redis_service, mock_redis):
    await redis_service.close()
    mock_redis.aclose.assert_awaited_once()


# --- Read-through cache ---


@pytest.mark.asyncio
async def test_read_through_miss_loads_and_stores(memory_store, clock):
    cache = ReadThroughCache(memory_store)
    loader = AsyncMock(return_value="56.5")

    assert await cache.get_or_load("fx:USD:ETB", loader, ttl=100) == "56.5"
    assert await cache.get_or_load("fx:USD:ETB", loader, ttl=100) == "56.5"
    loader.assert_awaited_once()

    clock.advance(100)
    loader.return_value = "57.0"
    assert await cache.get_or_load("fx:USD:ETB", loader, ttl=100) == "57.0"
    assert loader.await_count == 2


@pytest.mark.asyncio
async def test_read_through_loader_error_is_not_cached(memory_store):
    cache = ReadThroughCache(memory_store)
    loader = AsyncMock(side_effect=RuntimeError("provider down"))

    with pytest.raises(RuntimeError):
        await cache.get_or_load("fx:USD:ETB", loader, ttl=100)

    assert await memory_store.get("fx:USD:ETB") == (None, False)
