"""
Pydantic schemas for SETU endpoints
"""

from pydantic import BaseModel, Field, field_validator

from unitreviews.models.setu import SETU_METRIC_KEYS, SetuBase
from unitreviews.models.unit import normalize_unit_code
from unitreviews.schemas.base import UTCDatetime, UTCDatetimeOptional


def _validate_metrics(metrics: dict[str, list[float]]) -> dict[str, list[float]]:
    unknown = [k for k in metrics if k not in SETU_METRIC_KEYS]
    if unknown:
        raise ValueError(f"unknown SETU metric keys: {', '.join(sorted(unknown))}")
    for key, pair in metrics.items():
        if len(pair) != 2:
            raise ValueError(f"metric {key} must be a [mean, median] pair")
    return metrics


class SetuCreate(SetuBase):
    """Schema for creating a SETU entry"""

    responses: int = Field(ge=0)
    invited: int = Field(ge=0)
    metrics: dict[str, list[float]] = Field(default_factory=dict)

    @field_validator("unit_code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return normalize_unit_code(v)

    @field_validator("metrics")
    @classmethod
    def validate_metrics(cls, v: dict[str, list[float]]) -> dict[str, list[float]]:
        return _validate_metrics(v)


class SetuUpdate(BaseModel):
    """Schema for updating a SETU entry - all fields optional"""

    unit_name: str | None = None
    responses: int | None = Field(default=None, ge=0)
    invited: int | None = Field(default=None, ge=0)
    response_rate: float | None = None
    level: int | None = None
    agg_mean: float | None = None
    agg_median: float | None = None
    metrics: dict[str, list[float]] | None = None

    @field_validator("metrics")
    @classmethod
    def validate_metrics(cls, v: dict[str, list[float]] | None) -> dict[str, list[float]] | None:
        if v is None:
            return v
        return _validate_metrics(v)


class SetuResponse(SetuBase):
    setu_id: int
    metrics: dict[str, list[float]]
    created_at: UTCDatetime
    updated_at: UTCDatetimeOptional = None


class SetuBulkCreate(BaseModel):
    entries: list[SetuCreate] = Field(min_length=1)


class SetuBulkResult(BaseModel):
    total_processed: int
    created: int
    skipped: int


class SetuAverageResponse(BaseModel):
    """Mean of aggregate scores across every season of a unit"""

    unit_code: str
    seasons: int
    avg_agg_mean: float | None
    avg_agg_median: float | None
    total_responses: int
