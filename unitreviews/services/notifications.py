"""
Notification lifecycle.

Like notifications are created when a user likes a review and deleted when
that like is withdrawn. There is at most one per (recipient, review, liker).
The create/remove helpers only flush; the caller owns the transaction.
"""

from collections.abc import Sequence

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.config import NotificationKind
from unitreviews.core.database import unit_of_work
from unitreviews.core.errors import AuthorizationError, NotFoundError
from unitreviews.core.logging import get_logger
from unitreviews.models import Notifications, Reviews, Units, Users

logger = get_logger(__name__)


def unit_path(unit_code: str) -> str:
    """Frontend route for a unit page."""
    return f"/unit/{unit_code}"


async def _find_like_notification(
    db: AsyncSession, author_id: int, review_id: int, liker_id: int
) -> Notifications | None:
    result = await db.execute(
        select(Notifications).where(
            Notifications.user_id == author_id,  # type: ignore[arg-type]
            Notifications.review_id == review_id,  # type: ignore[arg-type]
            Notifications.actor_id == liker_id,  # type: ignore[arg-type]
            Notifications.kind == NotificationKind.LIKE,  # type: ignore[arg-type]
        )
    )
    return result.scalar_one_or_none()


async def create_like_notification(
    db: AsyncSession,
    author_id: int,
    review: Reviews,
    liker: Users,
) -> Notifications:
    """
    Notify a review's author that ``liker`` liked it.

    The liker's username and avatar are copied into the notification. If a
    notification for this like already exists it is returned unchanged.

    Raises:
        NotFoundError: If the review's unit no longer exists
    """
    assert review.review_id is not None and liker.user_id is not None

    existing = await _find_like_notification(db, author_id, review.review_id, liker.user_id)
    if existing is not None:
        return existing

    unit = await db.get(Units, review.unit_id)
    if unit is None:
        raise NotFoundError("Unit not found")

    notification = Notifications(
        user_id=author_id,
        review_id=review.review_id,
        actor_id=liker.user_id,
        kind=NotificationKind.LIKE,
        actor_username=liker.username,
        actor_avatar=liker.profile_img,
        navigate_to=unit_path(unit.unit_code),
    )
    db.add(notification)
    await db.flush()

    logger.info(
        "like_notification_created",
        recipient_id=author_id,
        review_id=review.review_id,
        actor_id=liker.user_id,
    )
    return notification


async def remove_like_notification(
    db: AsyncSession,
    author_id: int,
    review_id: int,
    liker_id: int,
) -> bool:
    """
    Delete the like notification for (author, review, liker).

    Returns:
        True if a notification was deleted, False if none existed
    """
    notification = await _find_like_notification(db, author_id, review_id, liker_id)
    if notification is None:
        return False

    await db.delete(notification)
    await db.flush()

    logger.info(
        "like_notification_removed",
        recipient_id=author_id,
        review_id=review_id,
        actor_id=liker_id,
    )
    return True


async def list_user_notifications(db: AsyncSession, user_id: int) -> Sequence[Notifications]:
    """All notifications received by a user, newest first."""
    result = await db.execute(
        select(Notifications)
        .where(Notifications.user_id == user_id)  # type: ignore[arg-type]
        .order_by(desc(Notifications.timestamp), desc(Notifications.notification_id))  # type: ignore[arg-type]
    )
    return result.scalars().all()


async def _get_owned_notification(
    db: AsyncSession, notification_id: int, actor: Users
) -> Notifications:
    notification = await db.get(Notifications, notification_id)
    if notification is None:
        raise NotFoundError("Notification not found")
    if notification.user_id != actor.user_id:
        raise AuthorizationError("No permission to modify this notification")
    return notification


async def mark_notification_read(
    db: AsyncSession, notification_id: int, actor: Users
) -> Notifications:
    """
    Mark a notification as read. Only the recipient may do this.

    Raises:
        NotFoundError: If the notification does not exist
        AuthorizationError: If actor is not the recipient
    """
    async with unit_of_work(db):
        notification = await _get_owned_notification(db, notification_id, actor)
        notification.is_read = True
        db.add(notification)
    return notification


async def delete_notification(db: AsyncSession, notification_id: int, actor: Users) -> None:
    """
    Delete a notification. Only the recipient may do this.

    Raises:
        NotFoundError: If the notification does not exist
        AuthorizationError: If actor is not the recipient
    """
    async with unit_of_work(db):
        notification = await _get_owned_notification(db, notification_id, actor)
        await db.delete(notification)

    logger.info(
        "notification_deleted",
        notification_id=notification_id,
        recipient_id=actor.user_id,
    )
