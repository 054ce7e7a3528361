"""
Unit tag policy.

The "most-reviews" tag is held by at most one unit: the unit with the most
reviews, provided it has at least the configured threshold. The refresh
strips the tag everywhere and re-adds it to the winner in one transaction,
so readers never see two holders or a missing tag mid-swap.
"""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.config import UnitTag, settings
from unitreviews.core.database import unit_of_work
from unitreviews.core.errors import ValidationError
from unitreviews.core.logging import get_logger
from unitreviews.models import Reviews, Units, UnitTags

logger = get_logger(__name__)


async def get_unit_tags(db: AsyncSession, unit_id: int) -> list[str]:
    result = await db.execute(
        select(UnitTags.tag).where(UnitTags.unit_id == unit_id).order_by(UnitTags.tag)  # type: ignore[call-overload]
    )
    return list(result.scalars().all())


async def set_unit_tags(db: AsyncSession, unit_id: int, tags: list[str]) -> None:
    """
    Replace a unit's admin-assigned tags. Caller validates the values.

    A "most-reviews" tag the unit already holds is kept; only
    refresh_most_reviews_tag moves it. Only flushes; the caller owns the
    transaction.

    Raises:
        ValidationError: If the tags plus a held "most-reviews" tag exceed the per-unit cap
    """
    existing = (
        await db.execute(select(UnitTags).where(UnitTags.unit_id == unit_id))  # type: ignore[arg-type]
    ).scalars().all()
    holds_most_reviews = any(row.tag == UnitTag.MOST_REVIEWS for row in existing)
    if len(tags) + holds_most_reviews > UnitTag.MAX_PER_UNIT:
        raise ValidationError(
            f"A unit can have at most {UnitTag.MAX_PER_UNIT} tags including {UnitTag.MOST_REVIEWS}"
        )

    keep = set(tags) | {UnitTag.MOST_REVIEWS}
    for row in existing:
        if row.tag not in keep:
            await db.delete(row)
    present = {row.tag for row in existing}
    for tag in tags:
        if tag not in present:
            db.add(UnitTags(unit_id=unit_id, tag=tag))
    await db.flush()


async def find_most_reviewed_unit(db: AsyncSession, threshold: int) -> tuple[Units, int] | None:
    """
    The unit with the most reviews, if it has at least ``threshold``.

    Ties go to the lexicographically smallest unit code.
    """
    review_count = func.count(Reviews.review_id).label("review_count")  # type: ignore[arg-type]
    result = await db.execute(
        select(Units.unit_id, Units.unit_code, review_count)  # type: ignore[call-overload]
        .join(Reviews, Reviews.unit_id == Units.unit_id)
        .group_by(Units.unit_id, Units.unit_code)
        .having(review_count >= threshold)
        .order_by(review_count.desc(), Units.unit_code.asc())
        .limit(1)
    )
    row = result.first()
    if row is None:
        return None

    unit = await db.get(Units, row.unit_id)
    assert unit is not None
    return unit, row.review_count


async def refresh_most_reviews_tag(db: AsyncSession, threshold: int | None = None) -> str | None:
    """
    Move the "most-reviews" tag to the current most-reviewed unit.

    If the winner already carries the maximum number of other tags it is
    left without the tag and a warning is logged.

    Args:
        db: Database session
        threshold: Minimum review count (defaults to settings.MOST_REVIEWS_THRESHOLD)

    Returns:
        Code of the unit now holding the tag, or None
    """
    if threshold is None:
        threshold = settings.MOST_REVIEWS_THRESHOLD

    tagged_code: str | None = None

    async with unit_of_work(db):
        holders = (
            await db.execute(select(UnitTags).where(UnitTags.tag == UnitTag.MOST_REVIEWS))  # type: ignore[arg-type]
        ).scalars().all()
        for row in holders:
            await db.delete(row)
        await db.flush()

        winner = await find_most_reviewed_unit(db, threshold)
        if winner is not None:
            unit, count = winner
            assert unit.unit_id is not None
            other_tags = await get_unit_tags(db, unit.unit_id)
            if len(other_tags) >= UnitTag.MAX_PER_UNIT:
                logger.warning(
                    "most_reviews_tag_cap_reached",
                    unit_code=unit.unit_code,
                    review_count=count,
                    tags=other_tags,
                )
            else:
                db.add(UnitTags(unit_id=unit.unit_id, tag=UnitTag.MOST_REVIEWS))
                tagged_code = unit.unit_code

    logger.info(
        "most_reviews_tag_refreshed",
        tagged_unit_code=tagged_code,
        previous_holders=len(holders),
        threshold=threshold,
    )
    return tagged_code
