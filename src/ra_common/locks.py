"""Per-game finalization lock backed by Redis.

Two finalize runs over the same game would both read the same won-bid totals
before either writes, so every run holds this lock end to end.

Key pattern: "finalize:lock:{game_id}". redis-py's Lock stores a random token
and only releases or extends the key while it still holds that token. Long
batches call `renew()` between participants so the TTL never runs out while
work is still being done.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from redis.asyncio.lock import Lock
from redis.exceptions import LockError, LockNotOwnedError

from src.ra_common.errors import FinalizationInProgressError, FinalizationLockLostError

logger = logging.getLogger(__name__)


def lock_key(game_id: str) -> str:
    return f"finalize:lock:{game_id}"


class GameLockHandle:
    """What a finalize run holds while the lock is taken."""

    def __init__(self, lock: Lock, game_id: str) -> None:
        self._lock = lock
        self._game_id = game_id

    async def renew(self) -> None:
        """Reset the TTL to its full length; raises if the lock was lost."""
        try:
            await self._lock.reacquire()
        except LockError:
            raise FinalizationLockLostError(self._game_id) from None


@asynccontextmanager
async def game_lock(
    redis: aioredis.Redis, game_id: str, ttl_seconds: int
) -> AsyncIterator[GameLockHandle]:
    """Hold the finalize lock for game_id; raise FinalizationInProgressError if taken."""
    key = lock_key(game_id)
    lock = redis.lock(key, timeout=ttl_seconds, blocking=False, thread_local=False)
    if not await lock.acquire():
        raise FinalizationInProgressError(game_id)
    logger.debug("Acquired %s (ttl=%ds)", key, ttl_seconds)
    try:
        yield GameLockHandle(lock, game_id)
    finally:
        try:
            await lock.release()
        except LockNotOwnedError:
            logger.warning("Lock %s expired before release", key)
