"""
SETU API endpoints

SETU results are imported by admins, usually in bulk per season, and read by
the unit pages and the AI overview.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import desc, func, select, tuple_
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.api.dependencies import PaginationParams
from unitreviews.core.auth import AdminUser
from unitreviews.core.database import get_db, unit_of_work
from unitreviews.core.errors import ConflictError
from unitreviews.core.logging import get_logger
from unitreviews.models.base import utc_now
from unitreviews.models.setu import Setus
from unitreviews.models.unit import normalize_unit_code
from unitreviews.schemas.setu import (
    SetuAverageResponse,
    SetuBulkCreate,
    SetuBulkResult,
    SetuCreate,
    SetuResponse,
    SetuUpdate,
)

router = APIRouter(prefix="/setus", tags=["setus"])

logger = get_logger(__name__)


async def _get_setu(db: AsyncSession, setu_id: int) -> Setus:
    setu = await db.get(Setus, setu_id)
    if setu is None:
        raise HTTPException(status_code=404, detail="SETU entry not found")
    return setu


@router.get("/", response_model=list[SetuResponse])
async def list_setus(
    pagination: Annotated[PaginationParams, Depends()],
    db: AsyncSession = Depends(get_db),
) -> list[SetuResponse]:
    """All SETU entries, most recent season first."""
    result = await db.execute(
        select(Setus)
        .order_by(desc(Setus.season), Setus.unit_code, Setus.code)  # type: ignore[arg-type]
        .offset(pagination.offset)
        .limit(pagination.per_page)
    )
    return [SetuResponse.model_validate(s) for s in result.scalars().all()]


@router.get("/unit/{unit_code}", response_model=list[SetuResponse])
async def list_unit_setus(
    unit_code: str,
    db: AsyncSession = Depends(get_db),
) -> list[SetuResponse]:
    """SETU entries for a unit, most recent season first."""
    result = await db.execute(
        select(Setus)
        .where(Setus.unit_code == normalize_unit_code(unit_code))  # type: ignore[arg-type]
        .order_by(desc(Setus.season), Setus.code)  # type: ignore[arg-type]
    )
    return [SetuResponse.model_validate(s) for s in result.scalars().all()]


@router.get("/average/{unit_code}", response_model=SetuAverageResponse)
async def get_unit_setu_average(
    unit_code: str,
    db: AsyncSession = Depends(get_db),
) -> SetuAverageResponse:
    """Average aggregate score and total responses across a unit's seasons."""
    code = normalize_unit_code(unit_code)
    result = await db.execute(
        select(
            func.count(Setus.setu_id),  # type: ignore[arg-type]
            func.avg(Setus.agg_mean),
            func.avg(Setus.agg_median),
            func.coalesce(func.sum(Setus.responses), 0),
        ).where(Setus.unit_code == code)  # type: ignore[arg-type]
    )
    seasons, avg_mean, avg_median, total_responses = result.one()
    if not seasons:
        raise HTTPException(status_code=404, detail="No SETU data for this unit")

    return SetuAverageResponse(
        unit_code=code,
        seasons=seasons,
        avg_agg_mean=float(avg_mean) if avg_mean is not None else None,
        avg_agg_median=float(avg_median) if avg_median is not None else None,
        total_responses=int(total_responses),
    )


@router.get("/season/{season}", response_model=list[SetuResponse])
async def list_season_setus(
    season: str,
    db: AsyncSession = Depends(get_db),
) -> list[SetuResponse]:
    """SETU entries for one season (e.g. 2019_S1)."""
    result = await db.execute(
        select(Setus).where(Setus.season == season).order_by(Setus.unit_code, Setus.code)  # type: ignore[arg-type]
    )
    return [SetuResponse.model_validate(s) for s in result.scalars().all()]


@router.post("/", response_model=SetuResponse, status_code=status.HTTP_201_CREATED)
async def create_setu(
    data: SetuCreate,
    _admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> SetuResponse:
    """Create one SETU entry. Admin only."""
    async with unit_of_work(db):
        existing = await db.execute(
            select(Setus.setu_id).where(  # type: ignore[call-overload]
                Setus.unit_code == data.unit_code,
                Setus.season == data.season,
                Setus.code == data.code,
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("SETU entry already exists for this unit, season and code")

        setu = Setus(**data.model_dump())
        db.add(setu)
        await db.flush()

    logger.info("setu_created", unit_code=setu.unit_code, season=setu.season, code=setu.code)
    return SetuResponse.model_validate(setu)


@router.post("/bulk", response_model=SetuBulkResult, status_code=status.HTTP_201_CREATED)
async def bulk_create_setus(
    data: SetuBulkCreate,
    _admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> SetuBulkResult:
    """
    Import many SETU entries at once. Admin only.

    Entries that already exist (same unit, season and code), including
    duplicates within the request, are skipped rather than overwritten.
    """
    keys = {(e.unit_code, e.season, e.code) for e in data.entries}

    async with unit_of_work(db):
        existing = await db.execute(
            select(Setus.unit_code, Setus.season, Setus.code).where(  # type: ignore[call-overload]
                tuple_(Setus.unit_code, Setus.season, Setus.code).in_(list(keys))
            )
        )
        seen = {tuple(row) for row in existing.all()}

        created = 0
        for entry in data.entries:
            key = (entry.unit_code, entry.season, entry.code)
            if key in seen:
                continue
            seen.add(key)
            db.add(Setus(**entry.model_dump()))
            created += 1

    result = SetuBulkResult(
        total_processed=len(data.entries),
        created=created,
        skipped=len(data.entries) - created,
    )
    logger.info("setu_bulk_import", **result.model_dump())
    return result


@router.patch("/{setu_id}", response_model=SetuResponse)
async def update_setu(
    setu_id: int,
    data: SetuUpdate,
    _admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> SetuResponse:
    """Update a SETU entry. Admin only."""
    async with unit_of_work(db):
        setu = await _get_setu(db, setu_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(setu, key, value)
        setu.updated_at = utc_now()
        db.add(setu)

    return SetuResponse.model_validate(setu)


@router.delete("/{setu_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_setu(
    setu_id: int,
    _admin: AdminUser,
    db: AsyncSession = Depends(get_db),
) -> None:
    """Delete a SETU entry. Admin only."""
    async with unit_of_work(db):
        setu = await _get_setu(db, setu_id)
        await db.delete(setu)
