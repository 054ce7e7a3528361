"""
Notifications API endpoints
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.core.auth import CurrentUser
from unitreviews.core.database import get_db
from unitreviews.core.errors import AuthorizationError
from unitreviews.schemas.notification import NotificationListResponse, NotificationResponse
from unitreviews.services.notifications import (
    delete_notification as delete_user_notification,
)
from unitreviews.services.notifications import (
    list_user_notifications,
    mark_notification_read,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/user/{user_id}", response_model=NotificationListResponse)
async def get_user_notifications(
    user_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> NotificationListResponse:
    """A user's notifications, newest first. Users can only read their own."""
    if current_user.user_id != user_id:
        raise AuthorizationError("You can only view your own notifications")

    notifications = await list_user_notifications(db, user_id)
    return NotificationListResponse(
        total=len(notifications),
        unread=sum(1 for n in notifications if not n.is_read),
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
    )


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
async def read_notification(
    notification_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> NotificationResponse:
    notification = await mark_notification_read(db, notification_id, current_user)
    return NotificationResponse.model_validate(notification)


@router.delete("/{notification_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_notification(
    notification_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    await delete_user_notification(db, notification_id, current_user)
