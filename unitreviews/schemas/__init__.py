"""
Pydantic schemas for API responses and requests
"""

from unitreviews.schemas.auth import LoginRequest, TokenResponse, UserRegisterRequest
from unitreviews.schemas.notification import NotificationListResponse, NotificationResponse
from unitreviews.schemas.review import (
    ReactionRequest,
    ReactionResponse,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from unitreviews.schemas.setu import (
    SetuAverageResponse,
    SetuBulkCreate,
    SetuBulkResult,
    SetuCreate,
    SetuResponse,
    SetuUpdate,
)
from unitreviews.schemas.unit import (
    AIOverviewResponse,
    AIOverviewResult,
    UnitCreate,
    UnitListResponse,
    UnitResponse,
    UnitUpdate,
)
from unitreviews.schemas.user import (
    UserListResponse,
    UserPrivateResponse,
    UserResponse,
    UserUpdate,
)

__all__ = [
    "AIOverviewResponse",
    "AIOverviewResult",
    "LoginRequest",
    "NotificationListResponse",
    "NotificationResponse",
    "ReactionRequest",
    "ReactionResponse",
    "ReviewCreate",
    "ReviewListResponse",
    "ReviewResponse",
    "ReviewUpdate",
    "SetuAverageResponse",
    "SetuBulkCreate",
    "SetuBulkResult",
    "SetuCreate",
    "SetuResponse",
    "SetuUpdate",
    "TokenResponse",
    "UnitCreate",
    "UnitListResponse",
    "UnitResponse",
    "UnitUpdate",
    "UserListResponse",
    "UserPrivateResponse",
    "UserRegisterRequest",
    "UserResponse",
    "UserUpdate",
]
