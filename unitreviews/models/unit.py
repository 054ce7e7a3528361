"""
SQLModel-based Unit models

UnitBase (shared public fields)
    ├─> Units (database table, adds aggregate rating fields)
    └─> UnitCreate/UnitUpdate/UnitResponse (API schemas, defined in unitreviews/schemas)

Tags and the cached AI overview are kept in their own tables (unit_tags,
unit_overviews) so that the tag policy and the overview sweep can rewrite
them without touching the unit row.
"""

from datetime import datetime

from sqlalchemy import JSON, Column, ForeignKeyConstraint, Index, Text
from sqlmodel import Field, SQLModel

from unitreviews.models.base import utc_now


def normalize_unit_code(code: str) -> str:
    """Unit codes are stored and compared lowercased (FIT2099 -> fit2099)."""
    return code.strip().lower()


class UnitBase(SQLModel):
    """Base model with shared public fields for Units."""

    unit_code: str = Field(max_length=20)
    name: str = Field(max_length=255)
    description: str = Field(default="", sa_type=Text)


class Units(UnitBase, table=True):
    """
    Database table for units.

    The four avg_* fields are derived state: always the mean of the matching
    rating over every review with this unit_id, or 0 when there are none.
    Only unitreviews.services.aggregates writes them.
    """

    __tablename__ = "units"

    __table_args__ = (Index("idx_units_unit_code", "unit_code", unique=True),)

    # Primary key
    unit_id: int | None = Field(default=None, primary_key=True)

    # Aggregate ratings (0-5)
    avg_overall_rating: float = Field(default=0.0)
    avg_relevancy_rating: float = Field(default=0.0)
    avg_faculty_rating: float = Field(default=0.0)
    avg_content_rating: float = Field(default=0.0)

    created_at: datetime = Field(default_factory=utc_now)


class UnitTags(SQLModel, table=True):
    """
    Tags attached to a unit.

    At most UnitTag.MAX_PER_UNIT rows per unit, tag values from UnitTag.ALL.
    The cap is enforced by the services that write this table.
    """

    __tablename__ = "unit_tags"

    __table_args__ = (
        ForeignKeyConstraint(
            ["unit_id"],
            ["units.unit_id"],
            ondelete="CASCADE",
            name="fk_unit_tags_unit_id",
        ),
        Index("idx_unit_tags_tag", "tag"),
    )

    unit_id: int = Field(primary_key=True)
    tag: str = Field(primary_key=True, max_length=32)


class UnitOverviews(SQLModel, table=True):
    """
    Cached AI-generated summary of a unit's reviews and SETU data.

    total_reviews_considered records how many reviews the unit had when the
    summary was generated; a different count makes the summary stale.
    """

    __tablename__ = "unit_overviews"

    __table_args__ = (
        ForeignKeyConstraint(
            ["unit_id"],
            ["units.unit_id"],
            ondelete="CASCADE",
            name="fk_unit_overviews_unit_id",
        ),
    )

    unit_id: int = Field(primary_key=True)
    summary: str = Field(sa_type=Text)
    generated_at: datetime = Field(default_factory=utc_now)
    model: str = Field(max_length=100)
    total_reviews_considered: int = Field(default=0)
    review_sample_size: int = Field(default=0)
    seasons: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
