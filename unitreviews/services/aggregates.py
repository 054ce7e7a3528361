"""
Unit rating aggregates.

Provides utilities for calculating and updating a unit's average ratings
from its current set of reviews.
"""

from collections.abc import Iterable
from dataclasses import asdict, dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.core.errors import NotFoundError
from unitreviews.core.logging import get_logger
from unitreviews.models import Reviews, Units

logger = get_logger(__name__)


@dataclass(frozen=True)
class RatingAverages:
    """The four per-dimension averages stored on a unit."""

    avg_overall_rating: float = 0.0
    avg_relevancy_rating: float = 0.0
    avg_faculty_rating: float = 0.0
    avg_content_rating: float = 0.0

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


def compute_averages(reviews: Iterable[Reviews]) -> RatingAverages:
    """
    Unweighted mean of each rating across ``reviews``.

    An empty collection gives all zeros.
    """
    count = 0
    overall = relevancy = faculty = content = 0.0
    for review in reviews:
        count += 1
        overall += review.overall_rating
        relevancy += review.relevancy_rating
        faculty += review.faculty_rating
        content += review.content_rating

    if count == 0:
        return RatingAverages()

    return RatingAverages(
        avg_overall_rating=overall / count,
        avg_relevancy_rating=relevancy / count,
        avg_faculty_rating=faculty / count,
        avg_content_rating=content / count,
    )


async def recompute_unit_aggregates(db: AsyncSession, unit_id: int) -> RatingAverages:
    """
    Recalculate and store the average ratings for a unit.

    Must run after every review create, update or delete, inside the same
    transaction as that write. Flushes pending changes first so reviews
    added or deleted earlier in the transaction are counted correctly.

    Args:
        db: Database session
        unit_id: ID of the unit to recalculate

    Raises:
        NotFoundError: If the unit does not exist
    """
    await db.flush()

    unit = await db.get(Units, unit_id)
    if unit is None:
        raise NotFoundError("Unit not found")

    result = await db.execute(select(Reviews).where(Reviews.unit_id == unit_id))  # type: ignore[arg-type]
    averages = compute_averages(result.scalars().all())

    unit.avg_overall_rating = averages.avg_overall_rating
    unit.avg_relevancy_rating = averages.avg_relevancy_rating
    unit.avg_faculty_rating = averages.avg_faculty_rating
    unit.avg_content_rating = averages.avg_content_rating
    db.add(unit)

    logger.debug("unit_aggregates_recomputed", unit_id=unit_id, **averages.as_dict())
    return averages
