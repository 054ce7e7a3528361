"""
Review lifecycle.

Every write to a review is followed by a recompute of its unit's aggregate
ratings inside the same transaction. Deletion lives in
unitreviews.services.cascade since it also clears reactions and notifications.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.core.database import unit_of_work
from unitreviews.core.errors import AuthorizationError, NotFoundError, ValidationError
from unitreviews.core.logging import get_logger
from unitreviews.models import Reviews, Units, Users
from unitreviews.models.base import utc_now
from unitreviews.models.unit import normalize_unit_code
from unitreviews.schemas.review import ReviewCreate, ReviewUpdate
from unitreviews.services.aggregates import recompute_unit_aggregates

logger = get_logger(__name__)


async def get_unit_by_code(db: AsyncSession, unit_code: str) -> Units:
    """
    Look up a unit by code (case-insensitive).

    Raises:
        NotFoundError: If no unit has this code
    """
    result = await db.execute(
        select(Units).where(Units.unit_code == normalize_unit_code(unit_code))  # type: ignore[arg-type]
    )
    unit = result.scalar_one_or_none()
    if unit is None:
        raise NotFoundError("Unit not found")
    return unit


async def create_review(
    db: AsyncSession, unit_code: str, author: Users, data: ReviewCreate
) -> Reviews:
    """
    Create a review of a unit and update the unit's averages.

    Raises:
        NotFoundError: If the unit does not exist
        ValidationError: If the author has already reviewed this unit
    """
    async with unit_of_work(db):
        unit = await get_unit_by_code(db, unit_code)
        assert unit.unit_id is not None

        existing = await db.execute(
            select(Reviews.review_id).where(  # type: ignore[call-overload]
                Reviews.user_id == author.user_id,
                Reviews.unit_id == unit.unit_id,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ValidationError("You have already reviewed this unit")

        review = Reviews(
            **data.model_dump(),
            unit_id=unit.unit_id,
            user_id=author.user_id,
        )
        db.add(review)
        await recompute_unit_aggregates(db, unit.unit_id)

    logger.info(
        "review_created",
        review_id=review.review_id,
        unit_code=unit.unit_code,
        user_id=author.user_id,
    )
    return review


async def update_review(
    db: AsyncSession, review_id: int, actor: Users, data: ReviewUpdate
) -> Reviews:
    """
    Update a review's fields and update its unit's averages.

    Only the author or an admin may edit a review. Counters, author and unit
    cannot be changed here.

    Raises:
        NotFoundError: If the review does not exist
        AuthorizationError: If actor is neither the author nor an admin
    """
    async with unit_of_work(db):
        review = await db.get(Reviews, review_id)
        if review is None:
            raise NotFoundError("Review not found")
        if review.user_id != actor.user_id and not actor.admin:
            raise AuthorizationError("No permission to edit this review")

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(review, field, value)
        if changes:
            review.updated_at = utc_now()
        db.add(review)

        await recompute_unit_aggregates(db, review.unit_id)

    logger.info(
        "review_updated",
        review_id=review_id,
        updated_by=actor.user_id,
        fields=sorted(changes),
    )
    return review
