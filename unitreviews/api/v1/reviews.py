"""
Reviews API endpoints
"""

from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import asc, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.api.dependencies import PaginationParams, ReviewSortParams
from unitreviews.core.auth import CurrentUser
from unitreviews.core.database import get_db
from unitreviews.models import Reviews, Units, Users
from unitreviews.schemas.review import (
    ReactionRequest,
    ReactionResponse,
    ReviewAuthor,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from unitreviews.services.cascade import delete_review as cascade_delete_review
from unitreviews.services.reactions import toggle_reaction
from unitreviews.services.reviews import create_review as create_unit_review
from unitreviews.services.reviews import get_unit_by_code
from unitreviews.services.reviews import update_review as update_unit_review

router = APIRouter(prefix="/reviews", tags=["reviews"])


async def build_review_responses(db: AsyncSession, reviews: Sequence[Reviews]) -> list[ReviewResponse]:
    """Embed author summaries and unit codes (one query each)."""
    if not reviews:
        return []

    user_ids = {r.user_id for r in reviews}
    unit_ids = {r.unit_id for r in reviews}

    users = await db.execute(select(Users).where(Users.user_id.in_(user_ids)))  # type: ignore[union-attr]
    authors = {u.user_id: ReviewAuthor.model_validate(u) for u in users.scalars().all()}

    units = await db.execute(
        select(Units.unit_id, Units.unit_code).where(Units.unit_id.in_(unit_ids))  # type: ignore[call-overload]
    )
    unit_codes = dict(units.all())

    return [
        ReviewResponse.model_validate(
            {
                **review.model_dump(),
                "author": authors.get(review.user_id),
                "unit_code": unit_codes.get(review.unit_id),
            }
        )
        for review in reviews
    ]


async def _list_reviews(
    db: AsyncSession,
    pagination: PaginationParams,
    sorting: ReviewSortParams,
    unit_id: int | None = None,
    user_id: int | None = None,
) -> ReviewListResponse:
    query = select(Reviews)
    if unit_id is not None:
        query = query.where(Reviews.unit_id == unit_id)  # type: ignore[arg-type]
    if user_id is not None:
        query = query.where(Reviews.user_id == user_id)  # type: ignore[arg-type]

    total_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = total_result.scalar() or 0

    order = asc if sorting.sort_order == "ASC" else desc
    query = (
        query.order_by(order(getattr(Reviews, sorting.sort_by)), desc(Reviews.review_id))  # type: ignore[arg-type]
        .offset(pagination.offset)
        .limit(pagination.per_page)
    )
    result = await db.execute(query)
    reviews = result.scalars().all()

    return ReviewListResponse(
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        reviews=await build_review_responses(db, reviews),
    )


@router.get("/", response_model=ReviewListResponse)
async def list_reviews(
    pagination: Annotated[PaginationParams, Depends()],
    sorting: Annotated[ReviewSortParams, Depends()],
    user_id: Annotated[int | None, Query(description="Only reviews by this user")] = None,
    db: AsyncSession = Depends(get_db),
) -> ReviewListResponse:
    """List all reviews, newest first by default."""
    return await _list_reviews(db, pagination, sorting, user_id=user_id)


@router.get("/unit/{unit_code}", response_model=ReviewListResponse)
async def list_unit_reviews(
    unit_code: str,
    pagination: Annotated[PaginationParams, Depends()],
    sorting: Annotated[ReviewSortParams, Depends()],
    db: AsyncSession = Depends(get_db),
) -> ReviewListResponse:
    """List the reviews of one unit."""
    unit = await get_unit_by_code(db, unit_code)
    return await _list_reviews(db, pagination, sorting, unit_id=unit.unit_id)


@router.post(
    "/unit/{unit_code}",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_review(
    unit_code: str,
    data: ReviewCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> ReviewResponse:
    """
    Review a unit. Each user may review a unit once.

    The unit's average ratings are updated in the same transaction.
    """
    review = await create_unit_review(db, unit_code, current_user, data)
    return (await build_review_responses(db, [review]))[0]


@router.get("/{review_id}", response_model=ReviewResponse)
async def get_review(
    review_id: int,
    db: AsyncSession = Depends(get_db),
) -> ReviewResponse:
    review = await db.get(Reviews, review_id)
    if review is None:
        raise HTTPException(status_code=404, detail="Review not found")
    return (await build_review_responses(db, [review]))[0]


@router.patch("/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: int,
    data: ReviewUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> ReviewResponse:
    """Edit a review. Author or admin only."""
    review = await update_unit_review(db, review_id, current_user, data)
    return (await build_review_responses(db, [review]))[0]


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    review_id: int,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Delete a review. Author or admin only.

    Also removes reactions to the review and notifications about it, and
    updates the unit's average ratings.
    """
    await cascade_delete_review(db, review_id, current_user)


@router.post("/{review_id}/reactions", response_model=ReactionResponse)
async def react_to_review(
    review_id: int,
    data: ReactionRequest,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> ReactionResponse:
    """
    Like or dislike a review.

    Sending the same reaction again removes it; sending the opposite one
    switches to it. Liking notifies the review's author.
    """
    assert current_user.user_id is not None
    result = await toggle_reaction(db, review_id, current_user.user_id, data.kind)
    assert result.review.review_id is not None
    return ReactionResponse(
        review_id=result.review.review_id,
        likes=result.review.likes,
        dislikes=result.review.dislikes,
        liked=result.liked,
        disliked=result.disliked,
    )
