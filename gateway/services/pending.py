from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import redis.asyncio as redis

from gateway.core.errors import RegistrationPending


log = logging.getLogger(__name__)


class PendingStore(Protocol):
    async def try_begin(self, identity: str) -> bool:
        ...

    async def end(self, identity: str) -> None:
        ...

    async def check(self, identity: str) -> bool:
        ...


class InMemoryPendingStore:
    def __init__(self) -> None:
        self._pending: set[str] = set()
        self._lock = asyncio.Lock()

    async def try_begin(self, identity: str) -> bool:
        async with self._lock:
            if identity in self._pending:
                return False
            self._pending.add(identity)
            return True

    async def end(self, identity: str) -> None:
        async with self._lock:
            self._pending.discard(identity)

    async def check(self, identity: str) -> bool:
        return identity in self._pending


class RedisPendingStore:
    """
    Shared store for multi-instance deployments.

    Keys expire after `ttl_seconds` so a crashed instance cannot leave a
    user blocked forever.
    """

    def __init__(self, redis_url: str, *, ttl_seconds: int, prefix: str = "pending-registration"):
        self.r = redis.from_url(redis_url, decode_responses=True)
        self._ttl = ttl_seconds
        self._prefix = prefix

    def _key(self, identity: str) -> str:
        return f"{self._prefix}:{identity}"

    async def try_begin(self, identity: str) -> bool:
        return bool(await self.r.set(self._key(identity), "1", nx=True, ex=self._ttl))

    async def end(self, identity: str) -> None:
        await self.r.delete(self._key(identity))

    async def check(self, identity: str) -> bool:
        return bool(await self.r.exists(self._key(identity)))

    async def aclose(self) -> None:
        await self.r.aclose()


class PendingClaim:
    """Held while a registration is in flight; released exactly once."""

    def __init__(self, tracker: PendingRegistrationTracker, identity: str):
        self.identity = identity
        self._tracker = tracker
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    async def release(self) -> None:
        if self._released:
            return
        self._released = True
        await self._tracker.end(self.identity)

    async def __aenter__(self) -> PendingClaim:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.release()


class PendingRegistrationTracker:
    def __init__(self, store: PendingStore):
        self._store = store

    async def try_begin(self, identity: str) -> bool:
        return await self._store.try_begin(identity)

    async def end(self, identity: str) -> None:
        await self._store.end(identity)
        log.info("pending registration cleared user=%s", identity)

    async def check(self, identity: str) -> bool:
        return await self._store.check(identity)

    async def claim(self, identity: str) -> PendingClaim:
        if not await self.try_begin(identity):
            raise RegistrationPending(details={"user": identity})
        return PendingClaim(self, identity)
