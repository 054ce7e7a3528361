"""Tests for the scheduled arq jobs."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from arq import Retry

from unitreviews.tasks.scheduled_jobs import (
    ai_overview_semester_sweep_job,
    ai_overview_sweep_job,
    refresh_most_reviews_tag_job,
)


@pytest.fixture
def ctx():
    """ARQ context with a mock Redis that grants every lock."""
    redis = AsyncMock()
    redis.set.return_value = True
    redis.eval.return_value = 1
    return {"redis": redis, "job_try": 1}


@pytest.fixture
def mock_session():
    """Stand-in for get_async_session(): an async context manager yielding a session."""
    session = MagicMock()
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    with patch("unitreviews.tasks.scheduled_jobs.get_async_session", return_value=session):
        yield session


@pytest.mark.unit
class TestRefreshMostReviewsTagJob:
    async def test_success(self, ctx, mock_session):
        with patch(
            "unitreviews.services.tag_manager.refresh_most_reviews_tag",
            new=AsyncMock(return_value="fit2099"),
        ) as mock_refresh:
            result = await refresh_most_reviews_tag_job(ctx)

        assert result == {"success": True, "tagged_unit_code": "fit2099"}
        mock_refresh.assert_awaited_once()
        ctx["redis"].eval.assert_awaited_once()

    async def test_skipped_when_lock_held(self, ctx, mock_session):
        ctx["redis"].set.return_value = None

        with patch(
            "unitreviews.services.tag_manager.refresh_most_reviews_tag", new=AsyncMock()
        ) as mock_refresh:
            result = await refresh_most_reviews_tag_job(ctx)

        assert result == {"skipped": True}
        mock_refresh.assert_not_awaited()

    async def test_retry_on_failure(self, ctx, mock_session):
        with patch(
            "unitreviews.services.tag_manager.refresh_most_reviews_tag",
            new=AsyncMock(side_effect=Exception("database unavailable")),
        ):
            with pytest.raises(Retry):
                await refresh_most_reviews_tag_job(ctx)

        # Lock is still released
        ctx["redis"].eval.assert_awaited_once()


@pytest.mark.unit
class TestAIOverviewSweepJob:
    async def test_returns_sweep_counters(self, ctx, mock_session):
        stats = {"processed": 3, "updated": 2, "skipped": 1, "errors": 0}
        with patch(
            "unitreviews.services.ai_overview.generate_overviews_for_all_units",
            new=AsyncMock(return_value=stats),
        ) as mock_sweep:
            result = await ai_overview_sweep_job(ctx, force=False)

        assert result == {"success": True, **stats}
        assert mock_sweep.await_args.kwargs["force"] is False

    async def test_skipped_when_sweep_already_running(self, ctx, mock_session):
        ctx["redis"].set.return_value = None

        with patch(
            "unitreviews.services.ai_overview.generate_overviews_for_all_units", new=AsyncMock()
        ) as mock_sweep:
            result = await ai_overview_sweep_job(ctx)

        assert result == {"skipped": True}
        mock_sweep.assert_not_awaited()

    async def test_semester_sweep_forces_regeneration(self, ctx, mock_session):
        with patch(
            "unitreviews.services.ai_overview.generate_overviews_for_all_units",
            new=AsyncMock(return_value={"processed": 0, "updated": 0, "skipped": 0, "errors": 0}),
        ) as mock_sweep:
            await ai_overview_semester_sweep_job(ctx)

        assert mock_sweep.await_args.kwargs["force"] is True
