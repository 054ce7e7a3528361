"""
Pydantic schemas for Unit endpoints
"""

from pydantic import BaseModel, Field, field_validator

from unitreviews.config import UnitTag
from unitreviews.models.unit import UnitBase, normalize_unit_code
from unitreviews.schemas.base import UTCDatetime


def _validate_tags(tags: list[str]) -> list[str]:
    unique = list(dict.fromkeys(tags))
    if UnitTag.MOST_REVIEWS in unique:
        raise ValueError(f"{UnitTag.MOST_REVIEWS} is assigned automatically and cannot be set")
    invalid = [t for t in unique if t not in UnitTag.ADMIN_ASSIGNABLE]
    if invalid:
        raise ValueError(f"tags must be drawn from: {', '.join(UnitTag.ADMIN_ASSIGNABLE)}")
    if len(unique) > UnitTag.MAX_PER_UNIT:
        raise ValueError(f"a unit can have at most {UnitTag.MAX_PER_UNIT} tags")
    return unique


class UnitCreate(UnitBase):
    """Schema for creating a new unit"""

    unit_code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=255)
    tags: list[str] = Field(default_factory=list)

    @field_validator("unit_code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return normalize_unit_code(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return _validate_tags(v)


class UnitUpdate(BaseModel):
    """
    Schema for updating a unit - all fields optional.

    Aggregate ratings are derived from reviews and cannot be set here.
    """

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    tags: list[str] | None = None

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return _validate_tags(v)


class AIOverviewResponse(BaseModel):
    """Cached AI summary of a unit"""

    summary: str
    generated_at: UTCDatetime
    model: str
    total_reviews_considered: int
    review_sample_size: int
    seasons: list[str] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class UnitResponse(UnitBase):
    """Schema for unit response - what API returns"""

    unit_id: int
    avg_overall_rating: float
    avg_relevancy_rating: float
    avg_faculty_rating: float
    avg_content_rating: float
    tags: list[str] = Field(default_factory=list)
    review_count: int = 0
    ai_overview: AIOverviewResponse | None = None


class UnitListResponse(BaseModel):
    """Schema for paginated unit list"""

    total: int
    page: int
    per_page: int
    units: list[UnitResponse]


class AIOverviewResult(BaseModel):
    """Outcome of an on-demand overview generation"""

    unit_code: str
    status: str
    reason: str | None = None
    ai_overview: AIOverviewResponse | None = None


class TagRefreshResponse(BaseModel):
    tagged_unit_code: str | None


class JobEnqueuedResponse(BaseModel):
    job_id: str | None
