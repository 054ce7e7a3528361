"""
Redis lock for scheduled jobs.

Used by the arq cron jobs so that a sweep that overruns its schedule, or a
manually queued sweep, never runs alongside another instance of itself.
"""

import secrets
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from redis.asyncio import Redis

from unitreviews.config import settings
from unitreviews.core.logging import get_logger

logger = get_logger(__name__)

LOCK_KEY_PREFIX = "unitreviews:lock:"

# Delete the key only if it still holds our token
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


async def acquire_lock(redis: Redis, name: str, ttl_seconds: int | None = None) -> str | None:
    """
    Try to take the named lock.

    Returns:
        The lock token if acquired, None if another holder has it
    """
    ttl = ttl_seconds or settings.JOB_LOCK_TTL_SECONDS
    token = secrets.token_hex(16)
    acquired = await redis.set(f"{LOCK_KEY_PREFIX}{name}", token, nx=True, ex=ttl)
    return token if acquired else None


async def release_lock(redis: Redis, name: str, token: str) -> bool:
    """Release the named lock if ``token`` still owns it."""
    released = await redis.eval(_RELEASE_SCRIPT, 1, f"{LOCK_KEY_PREFIX}{name}", token)  # type: ignore[misc]
    return bool(released)


@asynccontextmanager
async def job_lock(redis: Redis, name: str, ttl_seconds: int | None = None) -> AsyncIterator[bool]:
    """
    Hold the named lock for the duration of the block.

    Yields True if the lock was acquired, False if it is held elsewhere (the
    caller should skip its work).

    Usage:
        async with job_lock(ctx["redis"], "ai_overview_sweep") as acquired:
            if not acquired:
                return {"skipped": True}
            ...
    """
    token = await acquire_lock(redis, name, ttl_seconds)
    if token is None:
        logger.info("job_lock_held", lock=name)
        yield False
        return

    try:
        yield True
    finally:
        if not await release_lock(redis, name, token):
            logger.warning("job_lock_expired_before_release", lock=name)
