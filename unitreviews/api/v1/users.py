"""
Users API endpoints
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.api.dependencies import PaginationParams
from unitreviews.core.auth import CurrentUser
from unitreviews.core.database import get_db
from unitreviews.core.errors import AuthorizationError
from unitreviews.models.user import Users
from unitreviews.schemas.user import (
    UserDeletionResponse,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from unitreviews.services.cascade import delete_user as cascade_delete_user
from unitreviews.services.users import get_user_activity, update_user as update_user_profile

router = APIRouter(prefix="/users", tags=["users"])


async def build_user_response(db: AsyncSession, user: Users) -> UserResponse:
    assert user.user_id is not None
    activity = await get_user_activity(db, user.user_id)
    return UserResponse(
        user_id=user.user_id,
        username=user.username,
        profile_img=user.profile_img,
        admin=user.admin,
        verified=user.verified,
        date_joined=user.date_joined,
        review_ids=activity.review_ids,
        liked_review_ids=activity.liked_review_ids,
        disliked_review_ids=activity.disliked_review_ids,
    )


@router.get("/", response_model=UserListResponse)
async def list_users(
    pagination: Annotated[PaginationParams, Depends()],
    search: Annotated[str | None, Query(description="Search by username")] = None,
    db: AsyncSession = Depends(get_db),
) -> UserListResponse:
    """List users, oldest account first."""
    query = select(Users)
    if search:
        query = query.where(Users.username.like(f"%{search}%"))  # type: ignore[attr-defined]

    total_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = total_result.scalar() or 0

    query = query.order_by(Users.user_id).offset(pagination.offset).limit(pagination.per_page)  # type: ignore[arg-type]
    result = await db.execute(query)

    return UserListResponse(
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        users=[await build_user_response(db, user) for user in result.scalars().all()],
    )


@router.get("/{username}", response_model=UserResponse)
async def get_user(
    username: str,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Public profile with the user's reviews and reactions."""
    result = await db.execute(select(Users).where(Users.username == username))  # type: ignore[arg-type]
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return await build_user_response(db, user)


@router.patch("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    data: UserUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Update a profile. Users may edit themselves; admins may edit anyone."""
    user = await update_user_profile(db, user_id, current_user, data)
    return await build_user_response(db, user)


@router.delete("/{user_id}", response_model=UserDeletionResponse, status_code=status.HTTP_200_OK)
async def delete_user(
    user_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> UserDeletionResponse:
    """
    Delete an account and everything attached to it.

    Removes the user's reviews, reactions and notifications, fixes reaction
    counts on reviews they reacted to and recomputes affected units' ratings.
    """
    if current_user.user_id != user_id and not current_user.admin:
        raise AuthorizationError("No permission to delete this user")

    result = await cascade_delete_user(db, user_id)
    return UserDeletionResponse(
        user_id=result.user_id,
        deleted_review_ids=result.deleted_review_ids,
        affected_unit_ids=result.affected_unit_ids,
    )
