"""
Units API endpoints
"""

from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.api.dependencies import PaginationParams, UnitSortParams
from unitreviews.core.auth import AdminUser
from unitreviews.core.database import get_db, unit_of_work
from unitreviews.core.errors import ConflictError
from unitreviews.core.logging import get_logger
from unitreviews.models import Reviews, UnitOverviews, Units, UnitTags
from unitreviews.models.unit import normalize_unit_code
from unitreviews.schemas.unit import (
    AIOverviewResponse,
    AIOverviewResult,
    JobEnqueuedResponse,
    TagRefreshResponse,
    UnitCreate,
    UnitListResponse,
    UnitResponse,
    UnitUpdate,
)
from unitreviews.services.ai_overview import generate_overview_for_unit
from unitreviews.services.reviews import get_unit_by_code
from unitreviews.services.tag_manager import refresh_most_reviews_tag, set_unit_tags
from unitreviews.tasks.queue import enqueue_job

router = APIRouter(prefix="/units", tags=["units"])

logger = get_logger(__name__)


async def build_unit_responses(db: AsyncSession, units: Sequence[Units]) -> list[UnitResponse]:
    """Attach tags, review counts and cached overviews to units (one query each)."""
    unit_ids = [u.unit_id for u in units]
    if not unit_ids:
        return []

    tag_rows = await db.execute(
        select(UnitTags.unit_id, UnitTags.tag)  # type: ignore[call-overload]
        .where(UnitTags.unit_id.in_(unit_ids))
        .order_by(UnitTags.tag)
    )
    tags: dict[int, list[str]] = {}
    for unit_id, tag in tag_rows.all():
        tags.setdefault(unit_id, []).append(tag)

    count_rows = await db.execute(
        select(Reviews.unit_id, func.count(Reviews.review_id))  # type: ignore[call-overload]
        .where(Reviews.unit_id.in_(unit_ids))
        .group_by(Reviews.unit_id)
    )
    counts = dict(count_rows.all())

    overview_rows = await db.execute(
        select(UnitOverviews).where(UnitOverviews.unit_id.in_(unit_ids))  # type: ignore[attr-defined]
    )
    overviews = {o.unit_id: o for o in overview_rows.scalars().all()}

    responses = []
    for unit in units:
        overview = overviews.get(unit.unit_id)  # type: ignore[arg-type]
        responses.append(
            UnitResponse.model_validate(
                {
                    **unit.model_dump(),
                    "tags": tags.get(unit.unit_id, []),  # type: ignore[arg-type]
                    "review_count": counts.get(unit.unit_id, 0),
                    "ai_overview": AIOverviewResponse.model_validate(overview) if overview else None,
                }
            )
        )
    return responses


async def build_unit_response(db: AsyncSession, unit: Units) -> UnitResponse:
    return (await build_unit_responses(db, [unit]))[0]


@router.get("/", response_model=UnitListResponse)
async def list_units(
    pagination: Annotated[PaginationParams, Depends()],
    sorting: Annotated[UnitSortParams, Depends()],
    search: Annotated[str | None, Query(description="Search by unit code or name")] = None,
    tag: Annotated[str | None, Query(description="Only units carrying this tag")] = None,
    db: AsyncSession = Depends(get_db),
) -> UnitListResponse:
    """
    List units with optional search and tag filter.

    **Examples:**
    - All units: `/units`
    - Search: `/units?search=fit`
    - Most reviewed unit: `/units?tag=most-reviews`
    - Best rated first: `/units?sort_by=avg_overall_rating&sort_order=DESC`
    """
    query = select(Units)

    if search:
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                Units.unit_code.like(pattern),  # type: ignore[attr-defined]
                func.lower(Units.name).like(pattern),
            )
        )
    if tag:
        query = query.where(
            Units.unit_id.in_(select(UnitTags.unit_id).where(UnitTags.tag == tag))  # type: ignore[union-attr, call-overload]
        )

    total_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = total_result.scalar() or 0

    order = asc if sorting.sort_order == "ASC" else desc
    if sorting.sort_by == "review_count":
        review_count = (
            select(func.count(Reviews.review_id))  # type: ignore[arg-type]
            .where(Reviews.unit_id == Units.unit_id)
            .scalar_subquery()
        )
        query = query.order_by(order(review_count), Units.unit_code)
    else:
        query = query.order_by(order(getattr(Units, sorting.sort_by)), Units.unit_code)

    query = query.offset(pagination.offset).limit(pagination.per_page)
    result = await db.execute(query)
    units = result.scalars().all()

    return UnitListResponse(
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        units=await build_unit_responses(db, units),
    )


@router.post("/tags/refresh", response_model=TagRefreshResponse)
async def refresh_tags(
    _admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> TagRefreshResponse:
    """Recompute the "most-reviews" tag now instead of waiting for the hourly job."""
    tagged = await refresh_most_reviews_tag(db)
    return TagRefreshResponse(tagged_unit_code=tagged)


@router.post(
    "/ai-overview/sweep",
    response_model=JobEnqueuedResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def queue_ai_overview_sweep(
    _admin: AdminUser,
    force: Annotated[bool, Query(description="Regenerate fresh overviews too")] = False,
) -> JobEnqueuedResponse:
    """Queue a background sweep regenerating AI overviews for all units."""
    job_id = await enqueue_job("ai_overview_sweep_job", force=force, _job_id="ai_overview_sweep")
    return JobEnqueuedResponse(job_id=job_id)


@router.get("/{unit_code}", response_model=UnitResponse)
async def get_unit(
    unit_code: str,
    db: AsyncSession = Depends(get_db),
) -> UnitResponse:
    """Get a single unit by code (case-insensitive)."""
    unit = await get_unit_by_code(db, unit_code)
    return await build_unit_response(db, unit)


@router.post("/", response_model=UnitResponse, status_code=status.HTTP_201_CREATED)
async def create_unit(
    data: UnitCreate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> UnitResponse:
    """Create a unit. Admin only."""
    async with unit_of_work(db):
        existing = await db.execute(
            select(Units.unit_id).where(Units.unit_code == data.unit_code)  # type: ignore[call-overload]
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(f"Unit {data.unit_code} already exists")

        unit = Units(**data.model_dump(exclude={"tags"}))
        db.add(unit)
        await db.flush()
        assert unit.unit_id is not None
        await set_unit_tags(db, unit.unit_id, data.tags)

    logger.info("unit_created", unit_code=unit.unit_code, created_by=admin.user_id)
    return await build_unit_response(db, unit)


@router.patch("/{unit_code}", response_model=UnitResponse)
async def update_unit(
    unit_code: str,
    data: UnitUpdate,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> UnitResponse:
    """Update a unit's name, description or tags. Admin only."""
    async with unit_of_work(db):
        unit = await get_unit_by_code(db, unit_code)
        assert unit.unit_id is not None

        changes = data.model_dump(exclude_unset=True, exclude={"tags"})
        for key, value in changes.items():
            if value is not None:
                setattr(unit, key, value)
        db.add(unit)

        if data.tags is not None:
            await set_unit_tags(db, unit.unit_id, data.tags)

    logger.info("unit_updated", unit_code=unit.unit_code, updated_by=admin.user_id)
    return await build_unit_response(db, unit)


@router.delete("/{unit_code}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_unit(
    unit_code: str,
    admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    """
    Delete a unit. Admin only.

    Units that still have reviews cannot be deleted; delete the reviews first.
    """
    async with unit_of_work(db):
        unit = await get_unit_by_code(db, unit_code)

        has_reviews = await db.execute(
            select(Reviews.review_id).where(Reviews.unit_id == unit.unit_id).limit(1)  # type: ignore[call-overload]
        )
        if has_reviews.scalar_one_or_none() is not None:
            raise ConflictError("Unit still has reviews")

        for tag_row in (
            await db.execute(select(UnitTags).where(UnitTags.unit_id == unit.unit_id))  # type: ignore[arg-type]
        ).scalars().all():
            await db.delete(tag_row)
        overview = await db.get(UnitOverviews, unit.unit_id)
        if overview is not None:
            await db.delete(overview)
        await db.flush()
        await db.delete(unit)

    logger.info("unit_deleted", unit_code=unit_code, deleted_by=admin.user_id)


@router.get("/{unit_code}/ai-overview", response_model=AIOverviewResponse)
async def get_ai_overview(
    unit_code: str,
    db: AsyncSession = Depends(get_db),
) -> AIOverviewResponse:
    """Get the cached AI overview for a unit."""
    unit = await get_unit_by_code(db, unit_code)
    overview = await db.get(UnitOverviews, unit.unit_id)
    if overview is None:
        raise HTTPException(status_code=404, detail="No AI overview for this unit yet")
    return AIOverviewResponse.model_validate(overview)


@router.post("/{unit_code}/ai-overview", response_model=AIOverviewResult)
async def regenerate_ai_overview(
    unit_code: str,
    _admin: AdminUser,
    force: Annotated[bool, Query(description="Regenerate even if the overview is fresh")] = False,
    db: AsyncSession = Depends(get_db),
) -> AIOverviewResult:
    """
    Regenerate a unit's AI overview now. Admin only.

    Returns status "updated" or "skipped" with the reason
    (no-reviews, fresh, no-client).
    """
    unit = await get_unit_by_code(db, unit_code)
    outcome = await generate_overview_for_unit(db, unit, force=force)

    overview = await db.get(UnitOverviews, unit.unit_id)
    return AIOverviewResult(
        unit_code=unit.unit_code,
        status=outcome["status"],
        reason=outcome.get("reason"),
        ai_overview=AIOverviewResponse.model_validate(overview) if overview else None,
    )
