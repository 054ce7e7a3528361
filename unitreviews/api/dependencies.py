"""
Common query parameter models for API endpoints.

These Pydantic models are used with FastAPI's Depends() to provide reusable
query parameter sets, reducing code duplication across routes.
"""

from typing import Literal

from pydantic import BaseModel, Field, computed_field


class PaginationParams(BaseModel):
    """Common pagination query parameters."""

    page: int = Field(default=1, ge=1, description="Page number")
    per_page: int = Field(default=20, ge=1, le=100, description="Items per page")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def offset(self) -> int:
        """Calculate offset from page and per_page."""
        return (self.page - 1) * self.per_page


class ReviewSortParams(BaseModel):
    """Sorting parameters for review queries."""

    sort_by: Literal["created_at", "likes", "overall_rating"] = Field(
        default="created_at", description="Sort field"
    )
    sort_order: Literal["ASC", "DESC"] = Field(default="DESC", description="Sort order")


class UnitSortParams(BaseModel):
    """Sorting parameters for unit queries."""

    sort_by: Literal["unit_code", "avg_overall_rating", "review_count"] = Field(
        default="unit_code", description="Sort field"
    )
    sort_order: Literal["ASC", "DESC"] = Field(default="ASC", description="Sort order")
