"""
Queue client for enqueuing arq jobs from API endpoints.

Provides a simple interface for adding jobs to the arq queue.
"""

from typing import Any

from arq import create_pool
from arq.connections import ArqRedis, RedisSettings

from unitreviews.config import settings
from unitreviews.core.logging import get_logger

logger = get_logger(__name__)

# Global pool instance (created on first use)
_pool: ArqRedis | None = None


async def get_queue() -> ArqRedis:
    """
    Get or create arq Redis connection pool.

    Returns:
        ArqRedis pool instance
    """
    global _pool
    if _pool is None:
        redis_settings = RedisSettings.from_dsn(settings.ARQ_REDIS_URL)
        _pool = await create_pool(redis_settings)
        logger.info("arq_pool_created", redis_url=settings.ARQ_REDIS_URL)
    return _pool


async def enqueue_job(
    function_name: str,
    *args: Any,
    _job_id: str | None = None,
    **kwargs: Any,
) -> str | None:
    """
    Enqueue a job to arq worker.

    Passing a fixed _job_id makes arq ignore the request while a job with the
    same ID is queued or running.

    Returns:
        Job ID if enqueued, None if a duplicate was rejected or Redis failed

    Example:
        await enqueue_job("ai_overview_sweep_job", force=True)
    """
    try:
        pool = await get_queue()
        job = await pool.enqueue_job(function_name, *args, _job_id=_job_id, **kwargs)

        if job:
            logger.debug("job_enqueued", function=function_name, job_id=job.job_id, kwargs=kwargs)
            return job.job_id
        else:
            logger.warning("job_enqueue_failed", function=function_name, kwargs=kwargs)
            return None

    except Exception as e:
        logger.error(
            "job_enqueue_error",
            function=function_name,
            error=str(e),
            error_type=type(e).__name__,
        )
        return None


async def close_queue() -> None:
    """Close arq Redis connection pool (call on shutdown)."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("arq_pool_closed")
