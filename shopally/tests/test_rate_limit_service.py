"""Test the RateLimitService class."""

from unittest.mock import AsyncMock

import pytest

from shopally.services.rate_limit_service import RateLimitService
from shopally.utils import CacheStoreError, MissingDeviceIDError


@pytest.fixture
def rate_limit_service(memory_store):
    """RateLimitService over an in-memory store with a controllable clock."""
    return RateLimitService(memory_store, limit=5, window_seconds=60)


@pytest.fixture
def mocked_rate_limit_service():
    """RateLimitService with a fully mocked store."""
    cache = AsyncMock()
    cache.incr = AsyncMock(return_value=1)
    cache.expire = AsyncMock(return_value=True)
    return RateLimitService(cache, limit=5, window_seconds=60)


@pytest.mark.asyncio
async def test_sixth_request_in_window_is_rejected(rate_limit_service):
    for expected_count in range(1, 6):
        decision = await rate_limit_service.hit("device-1")
        assert decision.allowed
        assert decision.count == expected_count

    decision = await rate_limit_service.hit("device-1")
    assert not decision.allowed
    assert decision.count == 6
    assert decision.retry_after == 60


@pytest.mark.asyncio
async def test_window_resets_after_expiry(rate_limit_service, clock):
    for _ in range(6):
        await rate_limit_service.hit("device-1")

    clock.advance(61)

    decision = await rate_limit_service.hit("device-1")
    assert decision.allowed
    assert decision.count == 1


@pytest.mark.asyncio
async def test_window_starts_at_first_request(rate_limit_service, clock):
    """Later hits in the window do not extend it."""
    await rate_limit_service.hit("device-1")
    clock.advance(50)
    for _ in range(4):
        await rate_limit_service.hit("device-1")
    clock.advance(11)

    decision = await rate_limit_service.hit("device-1")
    assert decision.count == 1


@pytest.mark.asyncio
async def test_devices_are_counted_separately(rate_limit_service):
    for _ in range(5):
        await rate_limit_service.hit("device-1")

    decision = await rate_limit_service.hit("device-2")
    assert decision.allowed
    assert decision.count == 1


@pytest.mark.asyncio
async def test_expire_only_on_first_increment(mocked_rate_limit_service):
    cache = mocked_rate_limit_service.cache
    cache.incr.side_effect = [1, 2, 3]

    for _ in range(3):
        await mocked_rate_limit_service.hit("device-1")

    assert cache.incr.await_count == 3
    cache.incr.assert_awaited_with("rate:device-1")
    cache.expire.assert_awaited_once_with("rate:device-1", 60)


@pytest.mark.asyncio
@pytest.mark.parametrize("device_id", ["", "   ", None])
async def test_missing_device_id_does_not_touch_store(mocked_rate_limit_service, device_id):
    with pytest.raises(MissingDeviceIDError):
        await mocked_rate_limit_service.hit(device_id)

    mocked_rate_limit_service.cache.incr.assert_not_awaited()
    mocked_rate_limit_service.cache.expire.assert_not_awaited()


@pytest.mark.asyncio
async def test_expire_failure_is_logged_not_raised(mocked_rate_limit_service, caplog):
    mocked_rate_limit_service.cache.expire.side_effect = CacheStoreError("Redis EXPIRE failed", key="rate:device-1")

    decision = await mocked_rate_limit_service.hit("device-1")

    assert decision.allowed
    assert "Failed to set rate-limit window" in caplog.text


@pytest.mark.asyncio
async def test_incr_failure_propagates(mocked_rate_limit_service):
    mocked_rate_limit_service.cache.incr.side_effect = CacheStoreError("Redis INCR failed", key="rate:device-1")

    with pytest.raises(CacheStoreError):
        await mocked_rate_limit_service.hit("device-1")
