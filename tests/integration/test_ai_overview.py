"""Integration tests for AI overview generation with a fake summarizer."""

from datetime import timedelta

import pytest

from unitreviews.core.errors import ExternalServiceError
from unitreviews.models import Setus, UnitOverviews
from unitreviews.models.base import utc_now
from unitreviews.services.ai_overview import (
    generate_overview_for_unit,
    generate_overviews_for_all_units,
)

from tests.factories import make_review, make_unit


class FakeSummarizer:
    """Records prompts and returns a canned summary."""

    model_name = "fake-model"

    def __init__(self, reply: str = "Students found this unit well organised.", fail_for: str | None = None):
        self.reply = reply
        self.fail_for = fail_for
        self.prompts: list[str] = []

    async def summarize(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail_for and f"<code>{self.fail_for}</code>" in prompt:
            raise ExternalServiceError("AI summarizer request failed")
        return self.reply


@pytest.mark.integration
class TestGenerateOverviewForUnit:
    async def test_creates_overview(self, db_session, unit, review):
        db_session.add(
            Setus(
                unit_code="fit2099",
                unit_name="OO",
                code="FIT2099_CLAYTON",
                season="2024_S1",
                responses=40,
                invited=120,
                agg_mean=4.1,
                agg_median=4.0,
                metrics={"I8": [4.2, 4.0]},
            )
        )
        await db_session.commit()
        summarizer = FakeSummarizer()

        outcome = await generate_overview_for_unit(db_session, unit, summarizer=summarizer)

        assert outcome == {"status": "updated", "summary": "Students found this unit well organised."}
        overview = await db_session.get(UnitOverviews, unit.unit_id)
        assert overview.model == "fake-model"
        assert overview.total_reviews_considered == 1
        assert overview.review_sample_size == 1
        assert overview.seasons == ["2024_S1"]
        assert "Solid intro unit" in summarizer.prompts[0]
        assert 'season="2024_S1"' in summarizer.prompts[0]

    async def test_fresh_overview_skipped(self, db_session, unit, review):
        summarizer = FakeSummarizer()
        await generate_overview_for_unit(db_session, unit, summarizer=summarizer)

        outcome = await generate_overview_for_unit(db_session, unit, summarizer=summarizer)

        assert outcome == {"status": "skipped", "reason": "fresh"}
        assert len(summarizer.prompts) == 1

    async def test_new_review_makes_overview_stale(self, db_session, unit, review, other_user):
        summarizer = FakeSummarizer()
        await generate_overview_for_unit(db_session, unit, summarizer=summarizer)
        await make_review(db_session, unit, other_user)

        outcome = await generate_overview_for_unit(db_session, unit, summarizer=summarizer)

        assert outcome["status"] == "updated"
        overview = await db_session.get(UnitOverviews, unit.unit_id)
        assert overview.total_reviews_considered == 2

    async def test_old_overview_regenerated(self, db_session, unit, review):
        summarizer = FakeSummarizer()
        await generate_overview_for_unit(db_session, unit, summarizer=summarizer)
        overview = await db_session.get(UnitOverviews, unit.unit_id)
        overview.generated_at = utc_now() - timedelta(days=121)
        db_session.add(overview)
        await db_session.commit()

        outcome = await generate_overview_for_unit(db_session, unit, summarizer=summarizer)

        assert outcome["status"] == "updated"

    async def test_force_regenerates_fresh_overview(self, db_session, unit, review):
        summarizer = FakeSummarizer()
        await generate_overview_for_unit(db_session, unit, summarizer=summarizer)

        outcome = await generate_overview_for_unit(db_session, unit, force=True, summarizer=summarizer)

        assert outcome["status"] == "updated"
        assert len(summarizer.prompts) == 2

    async def test_unit_without_reviews_skipped(self, db_session, unit):
        summarizer = FakeSummarizer()

        outcome = await generate_overview_for_unit(db_session, unit, summarizer=summarizer)

        assert outcome == {"status": "skipped", "reason": "no-reviews"}
        assert summarizer.prompts == []

    async def test_no_client_configured(self, db_session, unit, review):
        outcome = await generate_overview_for_unit(db_session, unit)

        assert outcome == {"status": "skipped", "reason": "no-client"}
        assert await db_session.get(UnitOverviews, unit.unit_id) is None

    async def test_empty_summary_is_an_error(self, db_session, unit, review):
        with pytest.raises(ExternalServiceError):
            await generate_overview_for_unit(db_session, unit, summarizer=FakeSummarizer(reply="  "))

        assert await db_session.get(UnitOverviews, unit.unit_id) is None


@pytest.mark.integration
class TestOverviewSweep:
    async def test_sweep_counts_outcomes(self, db_session, unit, review, other_user):
        failing = await make_unit(db_session, "fit1045")
        await make_review(db_session, failing, other_user)
        await make_unit(db_session, "fit3077")  # No reviews: not part of the sweep
        summarizer = FakeSummarizer(fail_for="fit1045")

        stats = await generate_overviews_for_all_units(
            db_session, delay_seconds=0, summarizer=summarizer
        )

        assert stats == {"processed": 2, "updated": 1, "skipped": 0, "errors": 1}
        assert await db_session.get(UnitOverviews, unit.unit_id) is not None

    async def test_second_sweep_skips_fresh_units(self, db_session, unit, review):
        summarizer = FakeSummarizer()
        await generate_overviews_for_all_units(db_session, delay_seconds=0, summarizer=summarizer)

        stats = await generate_overviews_for_all_units(
            db_session, delay_seconds=0, summarizer=summarizer
        )

        assert stats == {"processed": 1, "updated": 0, "skipped": 1, "errors": 0}

    async def test_forced_sweep_regenerates_all(self, db_session, unit, review):
        summarizer = FakeSummarizer()
        await generate_overviews_for_all_units(db_session, delay_seconds=0, summarizer=summarizer)

        stats = await generate_overviews_for_all_units(
            db_session, force=True, delay_seconds=0, summarizer=summarizer
        )

        assert stats["updated"] == 1

    async def test_empty_database(self, db_session):
        stats = await generate_overviews_for_all_units(db_session, summarizer=FakeSummarizer())

        assert stats == {"processed": 0, "updated": 0, "skipped": 0, "errors": 0}
