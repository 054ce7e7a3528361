"""
Review reactions (like/dislike toggling).

A user's reaction to a review is in one of three states: none, liked or
disliked. Requesting the current state clears it; requesting the other state
switches to it. Each transition adjusts the review's like/dislike counters
and creates or removes the author's like notification, all in one
transaction that holds a row lock on the review.
"""

from dataclasses import dataclass

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.config import ReactionKind
from unitreviews.core.database import unit_of_work
from unitreviews.core.errors import NotFoundError, ValidationError
from unitreviews.core.logging import get_logger
from unitreviews.models import ReviewReactions, Reviews, Units, Users
from unitreviews.services.notifications import (
    create_like_notification,
    remove_like_notification,
)

logger = get_logger(__name__)

# Counter change for (current, next): (likes delta, dislikes delta)
_COUNTER_DELTAS: dict[tuple[ReactionKind | None, ReactionKind | None], tuple[int, int]] = {
    (None, ReactionKind.LIKE): (1, 0),
    (ReactionKind.LIKE, None): (-1, 0),
    (None, ReactionKind.DISLIKE): (0, 1),
    (ReactionKind.DISLIKE, None): (0, -1),
    (ReactionKind.DISLIKE, ReactionKind.LIKE): (1, -1),
    (ReactionKind.LIKE, ReactionKind.DISLIKE): (-1, 1),
}


@dataclass
class ReactionResult:
    """Outcome of a toggle: the updated review and the user's new state."""

    review: Reviews
    liked: bool
    disliked: bool


def parse_reaction_kind(kind: str) -> ReactionKind:
    """
    Convert a requested reaction kind to ReactionKind.

    Raises:
        ValidationError: If kind is not "like" or "dislike"
    """
    try:
        return ReactionKind(kind)
    except ValueError:
        raise ValidationError("Invalid reaction type") from None


def next_reaction(current: ReactionKind | None, requested: ReactionKind) -> ReactionKind | None:
    """
    State after ``requested`` is applied to ``current``.

    Same kind toggles off; the other kind (or none) switches to requested.
    """
    if current == requested:
        return None
    return requested


def counter_deltas(
    current: ReactionKind | None, new: ReactionKind | None
) -> tuple[int, int]:
    """(likes, dislikes) change for a transition. No change gives (0, 0)."""
    return _COUNTER_DELTAS.get((current, new), (0, 0))


async def get_user_reaction(
    db: AsyncSession, user_id: int, review_id: int
) -> ReviewReactions | None:
    return await db.get(ReviewReactions, (user_id, review_id))


def locked_review_query(review_id: int) -> Select:
    return (
        select(Reviews)
        .where(Reviews.review_id == review_id)  # type: ignore[arg-type]
        .with_for_update()
        .execution_options(populate_existing=True)
    )


def locked_reaction_query(user_id: int, review_id: int) -> Select:
    """
    Locking read of a user's reaction row.

    A locking read sees the latest committed row rather than the
    transaction's snapshot, and populate_existing refreshes any copy
    already held by the session.
    """
    return (
        select(ReviewReactions)
        .where(
            ReviewReactions.user_id == user_id,  # type: ignore[arg-type]
            ReviewReactions.review_id == review_id,  # type: ignore[arg-type]
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )


async def toggle_reaction(
    db: AsyncSession,
    review_id: int,
    user_id: int,
    kind: str,
) -> ReactionResult:
    """
    Apply a like or dislike from ``user_id`` to a review.

    Args:
        db: Database session
        review_id: Review being reacted to
        user_id: Reacting user
        kind: "like" or "dislike"

    Returns:
        ReactionResult with the updated review and the user's new state

    Raises:
        ValidationError: If kind is not a valid reaction (before any read)
        NotFoundError: If the review, the user, the unit or the review's author is missing
    """
    requested = parse_reaction_kind(kind)

    async with unit_of_work(db):
        # Serializes concurrent toggles on the same review
        review = (await db.execute(locked_review_query(review_id))).scalar_one_or_none()
        if review is None:
            raise NotFoundError("Review not found")

        user = await db.get(Users, user_id)
        if user is None:
            raise NotFoundError("User not found")

        if await db.get(Units, review.unit_id) is None:
            raise NotFoundError("Unit not found")

        author = await db.get(Users, review.user_id)
        if author is None:
            raise NotFoundError("Review author not found")

        # Read under the review lock, after any earlier toggle has committed
        reaction = (
            await db.execute(locked_reaction_query(user_id, review_id))
        ).scalar_one_or_none()
        current = ReactionKind(reaction.kind) if reaction is not None else None
        new = next_reaction(current, requested)

        likes_delta, dislikes_delta = counter_deltas(current, new)
        review.likes = max(0, review.likes + likes_delta)
        review.dislikes = max(0, review.dislikes + dislikes_delta)
        db.add(review)

        if new is None:
            assert reaction is not None
            await db.delete(reaction)
        elif reaction is None:
            db.add(ReviewReactions(user_id=user_id, review_id=review_id, kind=new.value))
        else:
            reaction.kind = new.value
            db.add(reaction)
        await db.flush()

        is_self_reaction = author.user_id == user_id
        if current == ReactionKind.LIKE and new != ReactionKind.LIKE:
            await remove_like_notification(db, review.user_id, review_id, user_id)
        elif new == ReactionKind.LIKE and current != ReactionKind.LIKE and not is_self_reaction:
            await create_like_notification(db, review.user_id, review, user)

    logger.info(
        "review_reaction_toggled",
        review_id=review_id,
        user_id=user_id,
        requested=requested.value,
        previous=current.value if current else None,
        state=new.value if new else None,
        likes=review.likes,
        dislikes=review.dislikes,
    )

    return ReactionResult(
        review=review,
        liked=new == ReactionKind.LIKE,
        disliked=new == ReactionKind.DISLIKE,
    )
