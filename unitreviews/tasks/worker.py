"""
ARQ worker configuration and job definitions.

Run worker with: uv run arq unitreviews.tasks.worker.WorkerSettings
"""

from typing import Any

from arq.connections import RedisSettings
from arq.cron import cron
from arq.worker import func

from unitreviews.config import settings
from unitreviews.tasks.scheduled_jobs import (
    ai_overview_semester_sweep_job,
    ai_overview_sweep_job,
    refresh_most_reviews_tag_job,
)


async def startup(ctx: dict[str, Any]) -> None:
    """Worker startup - initialize any shared resources."""
    from unitreviews.core.logging import configure_logging, get_logger

    configure_logging()
    logger = get_logger(__name__)
    logger.info("arq_worker_starting", redis_url=settings.ARQ_REDIS_URL)


async def shutdown(ctx: dict[str, Any]) -> None:
    """Worker shutdown - cleanup resources."""
    from unitreviews.core.logging import get_logger

    logger = get_logger(__name__)
    logger.info("arq_worker_shutdown")


class WorkerSettings:
    """ARQ worker configuration."""

    # Redis connection from settings
    redis_settings = RedisSettings.from_dsn(settings.ARQ_REDIS_URL)

    # Worker behavior
    max_jobs = 10
    job_timeout = settings.JOB_LOCK_TTL_SECONDS  # A sweep must finish before its lock expires
    keep_result = settings.ARQ_KEEP_RESULT  # Keep results for 1 hour

    # Lifecycle hooks
    on_startup = startup
    on_shutdown = shutdown

    # Job functions (also enqueueable on demand from the admin API)
    functions = [
        func(refresh_most_reviews_tag_job, max_tries=3),
        func(ai_overview_sweep_job, max_tries=1),
    ]

    cron_jobs = [
        # Top of every hour
        cron(refresh_most_reviews_tag_job, minute=0, run_at_startup=True),
        # Start of each semester (1 Feb and 1 Jun, 02:00)
        cron(ai_overview_semester_sweep_job, month={2, 6}, day=1, hour=2, minute=0),
    ]
