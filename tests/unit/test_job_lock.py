"""Tests for the Redis job lock."""

from unittest.mock import AsyncMock

import pytest

from unitreviews.services.job_lock import LOCK_KEY_PREFIX, acquire_lock, job_lock, release_lock


@pytest.fixture
def mock_redis():
    """Mock async Redis client. SET NX succeeds and the release script deletes one key."""
    client = AsyncMock()
    client.set.return_value = True
    client.eval.return_value = 1
    return client


@pytest.mark.unit
class TestJobLock:
    async def test_acquire_uses_set_nx_with_expiry(self, mock_redis):
        token = await acquire_lock(mock_redis, "sweep", ttl_seconds=60)

        assert token is not None
        mock_redis.set.assert_awaited_once_with(f"{LOCK_KEY_PREFIX}sweep", token, nx=True, ex=60)

    async def test_acquire_returns_none_when_held(self, mock_redis):
        mock_redis.set.return_value = None

        assert await acquire_lock(mock_redis, "sweep") is None

    async def test_release_passes_token_to_script(self, mock_redis):
        released = await release_lock(mock_redis, "sweep", "abc123")

        assert released is True
        args = mock_redis.eval.call_args[0]
        assert args[1:] == (1, f"{LOCK_KEY_PREFIX}sweep", "abc123")

    async def test_release_reports_lost_lock(self, mock_redis):
        mock_redis.eval.return_value = 0

        assert await release_lock(mock_redis, "sweep", "stale") is False

    async def test_context_manager_acquires_and_releases(self, mock_redis):
        async with job_lock(mock_redis, "sweep") as acquired:
            assert acquired is True
            mock_redis.eval.assert_not_awaited()

        token = mock_redis.set.call_args[0][1]
        assert mock_redis.eval.call_args[0][3] == token

    async def test_context_manager_skips_when_held(self, mock_redis):
        mock_redis.set.return_value = None

        async with job_lock(mock_redis, "sweep") as acquired:
            assert acquired is False

        mock_redis.eval.assert_not_awaited()

    async def test_lock_released_when_block_raises(self, mock_redis):
        with pytest.raises(RuntimeError):
            async with job_lock(mock_redis, "sweep"):
                raise RuntimeError("boom")

        mock_redis.eval.assert_awaited_once()
