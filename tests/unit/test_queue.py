"""Tests for the arq queue client."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from unitreviews.tasks.queue import enqueue_job


@pytest.mark.unit
class TestEnqueueJob:
    async def test_returns_job_id(self):
        pool = MagicMock()
        pool.enqueue_job = AsyncMock(return_value=MagicMock(job_id="ai_overview_sweep"))

        with patch("unitreviews.tasks.queue.get_queue", new=AsyncMock(return_value=pool)):
            job_id = await enqueue_job("ai_overview_sweep_job", force=True, _job_id="ai_overview_sweep")

        assert job_id == "ai_overview_sweep"
        pool.enqueue_job.assert_awaited_once_with(
            "ai_overview_sweep_job", _job_id="ai_overview_sweep", force=True
        )

    async def test_duplicate_job_returns_none(self):
        pool = MagicMock()
        pool.enqueue_job = AsyncMock(return_value=None)

        with patch("unitreviews.tasks.queue.get_queue", new=AsyncMock(return_value=pool)):
            assert await enqueue_job("ai_overview_sweep_job", _job_id="ai_overview_sweep") is None

    async def test_redis_failure_returns_none(self):
        with patch(
            "unitreviews.tasks.queue.get_queue",
            new=AsyncMock(side_effect=ConnectionError("redis down")),
        ):
            assert await enqueue_job("refresh_most_reviews_tag_job") is None
