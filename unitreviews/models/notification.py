"""
SQLModel-based Notification models

NotificationBase (shared public fields)
    ├─> Notifications (database table)
    └─> NotificationResponse (API schema, defined in unitreviews/schemas)

actor_username and actor_avatar are a snapshot taken when the notification
is created. They are not updated if the actor later renames or changes
their profile image.
"""

from datetime import datetime

from sqlalchemy import ForeignKeyConstraint, Index
from sqlmodel import Field, SQLModel

from unitreviews.models.base import utc_now


class NotificationBase(SQLModel):
    """Base model with shared public fields for Notifications."""

    kind: str = Field(max_length=20)
    actor_username: str = Field(max_length=64)
    actor_avatar: str | None = Field(default=None, max_length=512)
    navigate_to: str = Field(max_length=255)
    is_read: bool = Field(default=False)


class Notifications(NotificationBase, table=True):
    """
    Database table for notifications.

    user_id is the recipient. For like notifications review_id is the liked
    review and actor_id the user who liked it.

    Constraints:
    - Unique on (user_id, review_id, actor_id, kind): one live notification
      per like relationship
    """

    __tablename__ = "notifications"

    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id"],
            ["users.user_id"],
            ondelete="CASCADE",
            name="fk_notifications_user_id",
        ),
        ForeignKeyConstraint(
            ["review_id"],
            ["reviews.review_id"],
            ondelete="CASCADE",
            name="fk_notifications_review_id",
        ),
        ForeignKeyConstraint(
            ["actor_id"],
            ["users.user_id"],
            ondelete="SET NULL",
            name="fk_notifications_actor_id",
        ),
        Index(
            "idx_notifications_like_relationship",
            "user_id",
            "review_id",
            "actor_id",
            "kind",
            unique=True,
        ),
        Index("idx_notifications_actor_id", "actor_id"),
    )

    # Primary key
    notification_id: int | None = Field(default=None, primary_key=True)

    # References
    user_id: int
    review_id: int | None = Field(default=None)
    actor_id: int | None = Field(default=None)

    timestamp: datetime = Field(default_factory=utc_now)
