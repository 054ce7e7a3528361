"""
SQLModel-based Review models with inheritance for security

ReviewBase (shared public fields)
    ├─> Reviews (database table, adds keys, counters and timestamps)
    └─> ReviewCreate/ReviewUpdate/ReviewResponse (API schemas, defined in unitreviews/schemas)
"""

from datetime import datetime

from sqlalchemy import ForeignKeyConstraint, Index, Text
from sqlmodel import Field, SQLModel

from unitreviews.models.base import utc_now


class ReviewBase(SQLModel):
    """
    Base model with shared public fields for Reviews.

    Ratings are 0-5. Semester is 1 or 2. Grade is an optional mark out of 100.
    """

    title: str = Field(max_length=255)
    semester: int
    year: int
    grade: int | None = Field(default=None)

    overall_rating: float
    relevancy_rating: float
    faculty_rating: float
    content_rating: float

    description: str = Field(sa_type=Text)


class Reviews(ReviewBase, table=True):
    """
    Database table for reviews.

    likes/dislikes are counters mirroring review_reactions; only the reaction
    state machine and the cascade coordinator change them, and never below 0.

    Constraints:
    - Unique on (user_id, unit_id): one review per author per unit
    """

    __tablename__ = "reviews"

    __table_args__ = (
        ForeignKeyConstraint(
            ["unit_id"],
            ["units.unit_id"],
            ondelete="CASCADE",
            name="fk_reviews_unit_id",
        ),
        ForeignKeyConstraint(
            ["user_id"],
            ["users.user_id"],
            ondelete="CASCADE",
            name="fk_reviews_user_id",
        ),
        Index("idx_reviews_user_unit", "user_id", "unit_id", unique=True),
        Index("idx_reviews_unit_id", "unit_id"),
        Index("idx_reviews_created_at", "created_at"),
    )

    # Primary key
    review_id: int | None = Field(default=None, primary_key=True)

    # References
    unit_id: int
    user_id: int

    # Reaction counters
    likes: int = Field(default=0)
    dislikes: int = Field(default=0)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime | None = Field(default=None)
