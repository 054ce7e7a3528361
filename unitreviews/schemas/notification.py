"""
Pydantic schemas for Notification endpoints
"""

from pydantic import BaseModel

from unitreviews.models.notification import NotificationBase
from unitreviews.schemas.base import UTCDatetime


class NotificationResponse(NotificationBase):
    """Schema for notification response"""

    notification_id: int
    user_id: int
    review_id: int | None = None
    actor_id: int | None = None
    timestamp: UTCDatetime


class NotificationListResponse(BaseModel):
    total: int
    unread: int
    notifications: list[NotificationResponse]
