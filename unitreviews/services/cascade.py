"""
Cascade deletion of users and reviews.

Deleting a user or a review touches several tables: the reviews themselves,
reactions on them, notifications pointing at them, reaction counters on
other users' reviews and the affected units' aggregate ratings. Each
deletion here runs as a single unit of work so a failure part-way leaves
nothing half-deleted.
"""

from collections.abc import Collection
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.config import NotificationKind, ReactionKind
from unitreviews.core.database import unit_of_work
from unitreviews.core.errors import AuthorizationError, NotFoundError
from unitreviews.core.logging import get_logger
from unitreviews.models import Notifications, ReviewReactions, Reviews, Users
from unitreviews.services.aggregates import recompute_unit_aggregates
from unitreviews.services.avatar import delete_profile_image

logger = get_logger(__name__)


@dataclass
class UserDeletionResult:
    """Summary of what a user deletion removed."""

    user_id: int
    deleted_review_ids: list[int] = field(default_factory=list)
    affected_unit_ids: list[int] = field(default_factory=list)
    removed_reactions: int = 0
    removed_notifications: int = 0
    avatar_deleted: bool = False


async def _delete_review_dependents(db: AsyncSession, review_ids: Collection[int]) -> tuple[int, int]:
    """
    Delete reactions on and notifications about the given reviews.

    Returns:
        (reactions removed, notifications removed)
    """
    if not review_ids:
        return 0, 0

    reactions = (
        await db.execute(
            select(ReviewReactions).where(ReviewReactions.review_id.in_(review_ids))  # type: ignore[attr-defined]
        )
    ).scalars().all()
    for reaction in reactions:
        await db.delete(reaction)

    notifications = (
        await db.execute(
            select(Notifications).where(Notifications.review_id.in_(review_ids))  # type: ignore[union-attr]
        )
    ).scalars().all()
    for notification in notifications:
        await db.delete(notification)

    await db.flush()
    return len(reactions), len(notifications)


async def _withdraw_user_reactions(db: AsyncSession, user_id: int) -> tuple[int, int]:
    """
    Remove every reaction a user has on other users' reviews.

    Decrements the reacted reviews' counters (never below 0) and deletes the
    like notifications the user caused.

    Returns:
        (reactions removed, notifications removed)
    """
    reactions = (
        await db.execute(
            select(ReviewReactions).where(ReviewReactions.user_id == user_id)  # type: ignore[arg-type]
        )
    ).scalars().all()

    for reaction in reactions:
        review = await db.get(Reviews, reaction.review_id)
        if review is not None:
            if reaction.kind == ReactionKind.LIKE:
                review.likes = max(0, review.likes - 1)
            elif reaction.kind == ReactionKind.DISLIKE:
                review.dislikes = max(0, review.dislikes - 1)
            db.add(review)
        await db.delete(reaction)

    caused = (
        await db.execute(
            select(Notifications).where(
                Notifications.actor_id == user_id,  # type: ignore[arg-type]
                Notifications.kind == NotificationKind.LIKE,  # type: ignore[arg-type]
            )
        )
    ).scalars().all()
    for notification in caused:
        await db.delete(notification)

    await db.flush()
    return len(reactions), len(caused)


async def delete_user(db: AsyncSession, user_id: int) -> UserDeletionResult:
    """
    Delete a user and everything that depends on them.

    Removes the user's reviews (with their reactions and notifications), the
    notifications the user received, the user's own reactions (adjusting the
    counters on the reviews they reacted to) and the like notifications they
    caused, then recomputes aggregates for every unit that lost a review.

    The stored profile image is deleted only after the commit succeeds, and
    a failure there does not fail the request.

    Raises:
        NotFoundError: If the user does not exist
        TransactionAbortError: If the commit fails (nothing is deleted)
    """
    result = UserDeletionResult(user_id=user_id)

    async with unit_of_work(db):
        user = await db.get(Users, user_id)
        if user is None:
            raise NotFoundError("User not found")
        profile_img = user.profile_img

        reviews = (
            await db.execute(select(Reviews).where(Reviews.user_id == user_id))  # type: ignore[arg-type]
        ).scalars().all()
        review_ids = [r.review_id for r in reviews if r.review_id is not None]
        unit_ids = sorted({r.unit_id for r in reviews})

        reactions_removed, notifications_removed = await _delete_review_dependents(db, review_ids)
        for review in reviews:
            await db.delete(review)
        await db.flush()

        received = (
            await db.execute(
                select(Notifications).where(Notifications.user_id == user_id)  # type: ignore[arg-type]
            )
        ).scalars().all()
        for notification in received:
            await db.delete(notification)
        notifications_removed += len(received)

        withdrawn, caused = await _withdraw_user_reactions(db, user_id)
        reactions_removed += withdrawn
        notifications_removed += caused

        for unit_id in unit_ids:
            await recompute_unit_aggregates(db, unit_id)

        await db.delete(user)

    result.deleted_review_ids = review_ids
    result.affected_unit_ids = unit_ids
    result.removed_reactions = reactions_removed
    result.removed_notifications = notifications_removed

    logger.info(
        "user_deleted",
        user_id=user_id,
        deleted_reviews=len(review_ids),
        affected_units=unit_ids,
        removed_reactions=reactions_removed,
        removed_notifications=notifications_removed,
    )

    result.avatar_deleted = delete_profile_image(profile_img)
    return result


async def delete_review(db: AsyncSession, review_id: int, actor: Users) -> None:
    """
    Delete a single review and recompute its unit's aggregates.

    Only the review's author or an admin may delete it.

    Raises:
        NotFoundError: If the review does not exist
        AuthorizationError: If actor is neither the author nor an admin
    """
    async with unit_of_work(db):
        review = await db.get(Reviews, review_id)
        if review is None:
            raise NotFoundError("Review not found")
        if review.user_id != actor.user_id and not actor.admin:
            raise AuthorizationError("No permission to delete this review")

        unit_id = review.unit_id
        reactions_removed, notifications_removed = await _delete_review_dependents(db, [review_id])
        await db.delete(review)
        await recompute_unit_aggregates(db, unit_id)

    logger.info(
        "review_deleted",
        review_id=review_id,
        unit_id=unit_id,
        deleted_by=actor.user_id,
        removed_reactions=reactions_removed,
        removed_notifications=notifications_removed,
    )
