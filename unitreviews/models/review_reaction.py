"""
Review reactions (likes and dislikes).

One row per (user, review) pair that currently has a reaction. The rows of
kind "like" for a user are that user's liked reviews; "dislike" rows are the
disliked reviews. The composite primary key makes the two sets disjoint.
"""

from datetime import datetime

from sqlalchemy import ForeignKeyConstraint, Index
from sqlmodel import Field, SQLModel

from unitreviews.models.base import utc_now


class ReviewReactions(SQLModel, table=True):
    """Database table for a user's reaction to a review."""

    __tablename__ = "review_reactions"

    __table_args__ = (
        ForeignKeyConstraint(
            ["user_id"],
            ["users.user_id"],
            ondelete="CASCADE",
            name="fk_review_reactions_user_id",
        ),
        ForeignKeyConstraint(
            ["review_id"],
            ["reviews.review_id"],
            ondelete="CASCADE",
            name="fk_review_reactions_review_id",
        ),
        Index("idx_review_reactions_review_kind", "review_id", "kind"),
    )

    user_id: int = Field(primary_key=True)
    review_id: int = Field(primary_key=True)

    # ReactionKind value: "like" or "dislike"
    kind: str = Field(max_length=10)

    created_at: datetime = Field(default_factory=utc_now)
