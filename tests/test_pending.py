import asyncio

import pytest

from gateway.core.errors import RegistrationPending
from gateway.services.pending import InMemoryPendingStore, PendingRegistrationTracker, RedisPendingStore


class FakeRedis:
    """Just the commands RedisPendingStore uses."""

    def __init__(self):
        self.data = {}
        self.expiry = {}

    async def set(self, key, value, nx=False, ex=None):
        if nx and key in self.data:
            return None
        self.data[key] = value
        self.expiry[key] = ex
        return True

    async def delete(self, key):
        return 1 if self.data.pop(key, None) is not None else 0

    async def exists(self, key):
        return 1 if key in self.data else 0


@pytest.fixture
def tracker():
    return PendingRegistrationTracker(InMemoryPendingStore())


@pytest.mark.asyncio
async def test_try_begin_is_exclusive_under_concurrency(tracker):
    results = await asyncio.gather(*[tracker.try_begin("alice") for _ in range(10)])
    assert results.count(True) == 1
    assert await tracker.check("alice") is True


@pytest.mark.asyncio
async def test_end_allows_a_new_begin(tracker):
    assert await tracker.try_begin("alice") is True
    await tracker.end("alice")
    assert await tracker.check("alice") is False
    assert await tracker.try_begin("alice") is True


@pytest.mark.asyncio
async def test_identities_are_independent(tracker):
    assert await tracker.try_begin("alice") is True
    assert await tracker.try_begin("bob") is True


@pytest.mark.asyncio
async def test_claim_raises_when_already_pending(tracker):
    await tracker.claim("alice")
    with pytest.raises(RegistrationPending):
        await tracker.claim("alice")


@pytest.mark.asyncio
async def test_claim_releases_once(tracker, monkeypatch):
    ended = []
    original_end = tracker.end

    async def counting_end(identity):
        ended.append(identity)
        await original_end(identity)

    monkeypatch.setattr(tracker, "end", counting_end)

    claim = await tracker.claim("alice")
    async with claim:
        pass
    await claim.release()

    assert ended == ["alice"]
    assert claim.released is True


@pytest.mark.asyncio
async def test_claim_released_on_exception(tracker):
    claim = await tracker.claim("alice")
    with pytest.raises(RuntimeError):
        async with claim:
            raise RuntimeError("boom")
    assert await tracker.check("alice") is False


@pytest.mark.asyncio
async def test_redis_store_uses_set_nx_with_expiry():
    store = RedisPendingStore("redis://localhost:6379/0", ttl_seconds=120)
    store.r = FakeRedis()
    tracker = PendingRegistrationTracker(store)

    assert await tracker.try_begin("alice") is True
    assert await tracker.try_begin("alice") is False
    assert store.r.expiry["pending-registration:alice"] == 120
    assert await tracker.check("alice") is True

    await tracker.end("alice")
    assert await tracker.check("alice") is False
