"""
Pydantic schemas for User endpoints
"""

from pydantic import BaseModel, Field, field_validator

from unitreviews.models.user import UserBase
from unitreviews.schemas.base import UTCDatetime


class UserUpdate(BaseModel):
    """Schema for updating a user profile - all fields optional"""

    username: str | None = Field(default=None, min_length=3, max_length=64)
    profile_img: str | None = Field(default=None, max_length=512)

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v


class UserResponse(UserBase):
    """
    Public user profile.

    review_ids, liked_review_ids and disliked_review_ids are derived from the
    reviews and review_reactions tables.
    """

    user_id: int
    admin: bool = False
    verified: bool = False
    date_joined: UTCDatetime
    review_ids: list[int] = Field(default_factory=list)
    liked_review_ids: list[int] = Field(default_factory=list)
    disliked_review_ids: list[int] = Field(default_factory=list)


class UserPrivateResponse(UserResponse):
    """Profile returned to the user themselves (includes email)"""

    email: str
    is_google_user: bool = False


class UserListResponse(BaseModel):
    """Schema for paginated user list"""

    total: int
    page: int
    per_page: int
    users: list[UserResponse]


class UserDeletionResponse(BaseModel):
    user_id: int
    deleted_review_ids: list[int]
    affected_unit_ids: list[int]
