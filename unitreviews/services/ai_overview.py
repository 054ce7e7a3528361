"""
AI-generated unit overviews.

A unit's overview is a short summary of its reviews and recent SETU results,
produced by the Gemini summarizer and cached in unit_overviews. An overview
is regenerated when forced, when the unit's review count has changed since
it was generated, or when it is older than the freshness window.

The prompt is XML so the model can tell the unit metadata, SETU results and
individual reviews apart. Review text is user content and is escaped.
"""

import asyncio
import re
from datetime import datetime, timedelta
from typing import Any
from xml.sax.saxutils import escape

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.config import settings
from unitreviews.core.database import unit_of_work
from unitreviews.core.errors import ExternalServiceError
from unitreviews.core.logging import get_logger
from unitreviews.models import Reviews, Setus, UnitOverviews, Units
from unitreviews.models.base import utc_now
from unitreviews.services.summarizer import SummarizerClient, get_summarizer

logger = get_logger(__name__)

INSTRUCTIONS = (
    "You summarise Monash University student feedback. Speak as a summariser "
    '(e.g. "Students report..."). Highlight consensus, note disagreements, '
    "and avoid speculation."
)
TASK = "Use the XML below as your only source. Produce a concise (3-4 sentences) overview."

# Quotes are escaped too since season values end up in attributes
_XML_ENTITIES = {'"': "&quot;", "'": "&apos;"}

_WHITESPACE = re.compile(r"\s+")


def xml_escape(value: Any) -> str:
    if value is None:
        return ""
    return escape(str(value), _XML_ENTITIES)


def _num(value: float | int | None) -> str:
    """Render a number the way it was entered (4.0 -> "4", 3.5 -> "3.5")."""
    if value is None:
        return ""
    return f"{value:g}"


def _fixed(value: float | None) -> str:
    return "" if value is None else f"{value:.2f}"


def sanitise_review_body(body: str | None) -> str:
    """Truncate, collapse whitespace and escape review text for the prompt."""
    raw = body or ""
    limit = settings.AI_OVERVIEW_MAX_REVIEW_TEXT_LENGTH
    if len(raw) > limit:
        raw = f"{raw[:limit]}..."
    return xml_escape(_WHITESPACE.sub(" ", raw).strip())


def should_regenerate(
    overview: UnitOverviews | None,
    review_count: int,
    force: bool = False,
    now: datetime | None = None,
) -> bool:
    """
    Decide whether a unit's cached overview needs regenerating.

    Args:
        overview: The cached overview, if any
        review_count: The unit's current number of reviews
        force: Regenerate regardless of freshness
        now: Current naive UTC time (defaults to utc_now())
    """
    if force:
        return True
    if overview is None or not overview.summary:
        return True
    if overview.total_reviews_considered != review_count:
        return True
    if overview.generated_at is None:
        return True

    now = now or utc_now()
    age = now - overview.generated_at
    return age >= timedelta(days=settings.AI_OVERVIEW_REGENERATION_DAYS)


def _ratings_xml(review: Reviews) -> str:
    # Tag names follow the labels students see on the review form
    return (
        f"<overall>{_num(review.overall_rating)}</overall>"
        f"<enjoyment>{_num(review.content_rating)}</enjoyment>"
        f"<simplicity>{_num(review.faculty_rating)}</simplicity>"
        f"<usefulness>{_num(review.relevancy_rating)}</usefulness>"
    )


def build_setu_xml(entries: list[Setus]) -> str:
    if not entries:
        return "<setu />"

    rows = []
    for entry in entries:
        lines = [
            f'    <setu-entry season="{xml_escape(entry.season)}">',
            f"        <responses>{entry.responses}</responses>",
            f"        <invited>{entry.invited}</invited>",
        ]
        if entry.agg_mean is not None:
            lines.append(f"        <aggregate-mean>{_fixed(entry.agg_mean)}</aggregate-mean>")
        if entry.agg_median is not None:
            lines.append(f"        <aggregate-median>{_fixed(entry.agg_median)}</aggregate-median>")
        satisfaction = (entry.metrics or {}).get("I8")
        if satisfaction:
            joined = ", ".join(_num(v) for v in satisfaction)
            lines.append(f"        <overall-satisfaction>{joined}</overall-satisfaction>")
        lines.append("    </setu-entry>")
        rows.append("\n".join(lines))

    return "<setu>\n" + "\n".join(rows) + "\n</setu>"


def build_reviews_xml(reviews: list[Reviews]) -> str:
    if not reviews:
        return "<reviews />"

    rows = [
        "    <review>"
        f"<title>{xml_escape(review.title)}</title>"
        f"<semester>{xml_escape(review.semester)}</semester>"
        f"<year>{review.year or ''}</year>"
        f"<grade>{xml_escape(review.grade)}</grade>"
        f"{_ratings_xml(review)}"
        f"<description>{sanitise_review_body(review.description)}</description>"
        "</review>"
        for review in reviews
    ]
    return "<reviews>\n" + "\n".join(rows) + "\n</reviews>"


def build_prompt(
    unit: Units,
    setu_entries: list[Setus],
    reviews: list[Reviews],
    total_review_count: int,
) -> str:
    """
    Build the summarizer prompt for a unit.

    Args:
        unit: The unit being summarised
        setu_entries: Most recent SETU entries (already limited)
        reviews: Review sample, newest first (already limited)
        total_review_count: Number of reviews the unit has in total
    """
    unit_xml = (
        "<unit>"
        f"<code>{xml_escape(unit.unit_code)}</code>"
        f"<name>{xml_escape(unit.name)}</name>"
        f"<avg-overall>{_fixed(unit.avg_overall_rating)}</avg-overall>"
        f"<avg-enjoyment>{_fixed(unit.avg_content_rating)}</avg-enjoyment>"
        f"<avg-simplicity>{_fixed(unit.avg_faculty_rating)}</avg-simplicity>"
        f"<avg-usefulness>{_fixed(unit.avg_relevancy_rating)}</avg-usefulness>"
        f"<total-reviews>{total_review_count}</total-reviews>"
        f"{build_setu_xml(setu_entries)}"
        f"{build_reviews_xml(reviews)}"
        "</unit>"
    )
    return f"{INSTRUCTIONS}\n\n{TASK}\n\n{unit_xml}"


async def count_unit_reviews(db: AsyncSession, unit_id: int) -> int:
    result = await db.execute(
        select(func.count(Reviews.review_id)).where(Reviews.unit_id == unit_id)  # type: ignore[arg-type]
    )
    return result.scalar() or 0


async def generate_overview_for_unit(
    db: AsyncSession,
    unit: Units,
    force: bool = False,
    summarizer: SummarizerClient | None = None,
) -> dict[str, Any]:
    """
    Regenerate a unit's overview if it is missing or stale.

    Args:
        db: Database session
        unit: Unit to summarise
        force: Regenerate even if the cached overview is fresh
        summarizer: Client to use (defaults to get_summarizer())

    Returns:
        {"status": "updated", "summary": ...} or
        {"status": "skipped", "reason": "no-reviews" | "fresh" | "no-client"}

    Raises:
        ExternalServiceError: If the summarizer fails or returns nothing
    """
    assert unit.unit_id is not None

    review_count = await count_unit_reviews(db, unit.unit_id)
    if review_count == 0:
        return {"status": "skipped", "reason": "no-reviews"}

    overview = await db.get(UnitOverviews, unit.unit_id)
    if not should_regenerate(overview, review_count, force):
        return {"status": "skipped", "reason": "fresh"}

    if summarizer is None:
        summarizer = get_summarizer()
    if summarizer is None:
        logger.warning("ai_overview_no_client", unit_code=unit.unit_code)
        return {"status": "skipped", "reason": "no-client"}

    reviews = (
        await db.execute(
            select(Reviews)
            .where(Reviews.unit_id == unit.unit_id)  # type: ignore[arg-type]
            .order_by(desc(Reviews.created_at), desc(Reviews.review_id))  # type: ignore[arg-type]
            .limit(settings.AI_OVERVIEW_MAX_REVIEW_SAMPLES)
        )
    ).scalars().all()
    setu_entries = (
        await db.execute(
            select(Setus)
            .where(Setus.unit_code == unit.unit_code)  # type: ignore[arg-type]
            .order_by(desc(Setus.season))  # type: ignore[arg-type]
            .limit(settings.AI_OVERVIEW_MAX_SETU_SEASONS)
        )
    ).scalars().all()

    prompt = build_prompt(unit, list(setu_entries), list(reviews), review_count)
    logger.debug(
        "ai_overview_prompt_built",
        unit_code=unit.unit_code,
        model=summarizer.model_name,
        prompt_length=len(prompt),
    )

    summary = (await summarizer.summarize(prompt)).strip()
    if not summary:
        logger.warning("ai_overview_empty_response", unit_code=unit.unit_code)
        raise ExternalServiceError("AI summarizer returned an empty response")

    async with unit_of_work(db):
        if overview is None:
            overview = UnitOverviews(unit_id=unit.unit_id, summary=summary, model=summarizer.model_name)
        overview.summary = summary
        overview.generated_at = utc_now()
        overview.model = summarizer.model_name
        overview.total_reviews_considered = review_count
        overview.review_sample_size = len(reviews)
        overview.seasons = [entry.season for entry in setu_entries]
        db.add(overview)

    logger.info(
        "ai_overview_updated",
        unit_code=unit.unit_code,
        model=summarizer.model_name,
        total_reviews=review_count,
        sample_size=len(reviews),
    )
    return {"status": "updated", "summary": summary}


async def generate_overviews_for_all_units(
    db: AsyncSession,
    force: bool = False,
    delay_seconds: float | None = None,
    summarizer: SummarizerClient | None = None,
) -> dict[str, int]:
    """
    Sweep every unit that has reviews, one at a time.

    A failure on one unit is logged and counted, and the sweep moves on.
    Waits ``delay_seconds`` between units to stay under the model's rate limit.

    Returns:
        {"processed": n, "updated": n, "skipped": n, "errors": n}
    """
    if delay_seconds is None:
        delay_seconds = settings.AI_OVERVIEW_SWEEP_DELAY_SECONDS
    if summarizer is None:
        summarizer = get_summarizer()

    result = await db.execute(
        select(Units.unit_id, Units.unit_code)  # type: ignore[call-overload]
        .where(Units.unit_id.in_(select(Reviews.unit_id).distinct()))
        .order_by(Units.unit_code)
    )
    targets = result.all()

    stats = {"processed": 0, "updated": 0, "skipped": 0, "errors": 0}
    if not targets:
        logger.info("ai_overview_sweep_no_units")
        return stats

    for index, (unit_id, unit_code) in enumerate(targets):
        stats["processed"] += 1
        try:
            # Reloaded each time since a failed unit's rollback expires loaded rows
            unit = await db.get(Units, unit_id)
            if unit is None:
                stats["skipped"] += 1
                continue
            outcome = await generate_overview_for_unit(db, unit, force=force, summarizer=summarizer)
        except Exception as e:
            stats["errors"] += 1
            logger.error(
                "ai_overview_unit_failed",
                unit_code=unit_code,
                error=str(e),
                error_type=type(e).__name__,
            )
        else:
            if outcome["status"] == "updated":
                stats["updated"] += 1
            else:
                stats["skipped"] += 1

        if delay_seconds and index < len(targets) - 1:
            await asyncio.sleep(delay_seconds)

    logger.info("ai_overview_sweep_complete", force=force, **stats)
    return stats
