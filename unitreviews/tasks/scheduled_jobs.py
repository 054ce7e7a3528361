"""Scheduled sweeps for the arq worker: unit tag refresh and AI overviews."""

from typing import Any

from arq import Retry

from unitreviews.config import settings
from unitreviews.core.database import get_async_session
from unitreviews.core.logging import bind_context, get_logger
from unitreviews.services.job_lock import job_lock

logger = get_logger(__name__)

TAG_REFRESH_LOCK = "most_reviews_tag_refresh"
AI_OVERVIEW_SWEEP_LOCK = "ai_overview_sweep"


async def refresh_most_reviews_tag_job(ctx: dict[str, Any]) -> dict[str, Any]:
    """
    Move the "most-reviews" tag to the most reviewed unit.

    Args:
        ctx: ARQ context dict

    Returns:
        dict with the tagged unit code, or {"skipped": True} if another
        refresh holds the lock

    Raises:
        Retry: If the refresh fails
    """
    bind_context(task="most_reviews_tag_refresh")

    async with job_lock(ctx["redis"], TAG_REFRESH_LOCK) as acquired:
        if not acquired:
            logger.info("most_reviews_tag_refresh_skipped", reason="lock_held")
            return {"skipped": True}

        try:
            from unitreviews.services.tag_manager import refresh_most_reviews_tag

            async with get_async_session() as db:
                tagged = await refresh_most_reviews_tag(db, settings.MOST_REVIEWS_THRESHOLD)

            logger.info("most_reviews_tag_refresh_completed", tagged_unit_code=tagged)
            return {"success": True, "tagged_unit_code": tagged}

        except Exception as e:
            logger.error(
                "most_reviews_tag_refresh_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise Retry(defer=ctx["job_try"] * 30) from e


async def ai_overview_sweep_job(ctx: dict[str, Any], force: bool = False) -> dict[str, Any]:
    """
    Regenerate stale AI overviews for every unit with reviews.

    Per-unit failures are counted by the sweep itself and do not fail the job.

    Args:
        ctx: ARQ context dict
        force: Regenerate fresh overviews too

    Returns:
        Sweep counters, or {"skipped": True} if a sweep is already running
    """
    bind_context(task="ai_overview_sweep", force=force)

    async with job_lock(ctx["redis"], AI_OVERVIEW_SWEEP_LOCK) as acquired:
        if not acquired:
            logger.info("ai_overview_sweep_skipped", reason="lock_held")
            return {"skipped": True}

        from unitreviews.services.ai_overview import generate_overviews_for_all_units

        async with get_async_session() as db:
            stats = await generate_overviews_for_all_units(db, force=force)

        return {"success": True, **stats}


async def ai_overview_semester_sweep_job(ctx: dict[str, Any]) -> dict[str, Any]:
    """Start-of-semester sweep: regenerate every overview regardless of age."""
    return await ai_overview_sweep_job(ctx, force=True)
