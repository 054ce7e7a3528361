"""
Pydantic schemas for Review endpoints
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from unitreviews.models.review import ReviewBase
from unitreviews.schemas.base import UTCDatetime, UTCDatetimeOptional


class ReviewCreate(ReviewBase):
    """Schema for creating a new review"""

    title: str = Field(min_length=1, max_length=255)
    semester: int = Field(ge=1, le=2)
    year: int = Field(ge=1900, le=2100)
    grade: int | None = Field(default=None, ge=0, le=100)

    overall_rating: float = Field(ge=0, le=5)
    relevancy_rating: float = Field(ge=0, le=5)
    faculty_rating: float = Field(ge=0, le=5)
    content_rating: float = Field(ge=0, le=5)

    description: str = Field(min_length=1)

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        return v.strip()


class ReviewUpdate(BaseModel):
    """Schema for updating a review - all fields optional"""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    semester: int | None = Field(default=None, ge=1, le=2)
    year: int | None = Field(default=None, ge=1900, le=2100)
    grade: int | None = Field(default=None, ge=0, le=100)

    overall_rating: float | None = Field(default=None, ge=0, le=5)
    relevancy_rating: float | None = Field(default=None, ge=0, le=5)
    faculty_rating: float | None = Field(default=None, ge=0, le=5)
    content_rating: float | None = Field(default=None, ge=0, le=5)

    description: str | None = Field(default=None, min_length=1)

    @field_validator(
        "title",
        "semester",
        "year",
        "overall_rating",
        "relevancy_rating",
        "faculty_rating",
        "content_rating",
        "description",
    )
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        # Only grade may be cleared; omit a field to leave it unchanged
        if v is None:
            raise ValueError("cannot be null")
        return v


class ReviewAuthor(BaseModel):
    """Minimal author information embedded in review responses"""

    user_id: int
    username: str
    profile_img: str | None = None

    model_config = {"from_attributes": True}


class ReviewResponse(ReviewBase):
    """Schema for review response - what API returns"""

    review_id: int
    unit_id: int
    user_id: int
    likes: int
    dislikes: int
    created_at: UTCDatetime
    updated_at: UTCDatetimeOptional = None
    author: ReviewAuthor | None = None
    unit_code: str | None = None


class ReviewListResponse(BaseModel):
    """Schema for paginated review list"""

    total: int
    page: int
    per_page: int
    reviews: list[ReviewResponse]


class ReactionRequest(BaseModel):
    """
    Request body for liking or disliking a review.

    kind is checked by the reaction service so an unknown value is reported
    as a domain validation error rather than a schema error.
    """

    kind: str


class ReactionResponse(BaseModel):
    """Review counters and the caller's reaction state after a toggle"""

    review_id: int
    likes: int
    dislikes: int
    liked: bool
    disliked: bool
