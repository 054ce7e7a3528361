"""
SETU (Student Evaluation of Teaching and Units) results.

Read-mostly reference data imported by admins. Each row is one offering of a
unit in one season (e.g. "2019_S1"). metrics maps the item keys I1..I13 to a
[mean, median] pair of scores out of 5.
"""

from datetime import datetime

from sqlalchemy import JSON, Column, Index
from sqlmodel import Field, SQLModel

from unitreviews.models.base import utc_now

SETU_METRIC_KEYS = tuple(f"I{i}" for i in range(1, 14))

# Survey statement for each item
SETU_METRIC_LABELS = {
    "I1": "The learning outcomes for this unit were clear to me",
    "I2": "The instructions for Assessment tasks were clear to me",
    "I3": "The assessment in this unit allowed me to demonstrate the learning outcomes",
    "I4": "The feedback helped me achieve the learning outcomes for this unit",
    "I5": "The resources helped me achieve the learning outcomes for this unit",
    "I6": "The activities helped me achieve the learning outcomes for this unit",
    "I7": "I attempted to engage in this unit to the best of my ability",
    "I8": "Overall, I was satisfied with this unit",
    "I9": "As the unit progressed I could see how the various topics were related to each other",
    "I10": "The online resources for this unit helped me succeed in this unit",
    "I11": "The workload in this unit was manageable",
    "I12": "The practical or tutorial exercises assisted my learning",
    "I13": "I found the pre-class activities for this unit useful",
}


class SetuBase(SQLModel):
    """Base model with shared public fields for SETU entries."""

    unit_code: str = Field(max_length=20)
    unit_name: str = Field(max_length=255)
    # Extended offering code with location and delivery mode
    code: str = Field(max_length=100)
    season: str = Field(max_length=20)
    responses: int
    invited: int
    response_rate: float | None = Field(default=None)
    level: int | None = Field(default=None)
    agg_mean: float | None = Field(default=None)
    agg_median: float | None = Field(default=None)


class Setus(SetuBase, table=True):
    """
    Database table for SETU entries.

    Constraints:
    - Unique on (unit_code, season, code)
    """

    __tablename__ = "setus"

    __table_args__ = (
        Index("idx_setus_unit_season_code", "unit_code", "season", "code", unique=True),
        Index("idx_setus_season", "season"),
    )

    setu_id: int | None = Field(default=None, primary_key=True)

    metrics: dict[str, list[float]] = Field(
        default_factory=dict, sa_column=Column(JSON, nullable=False)
    )

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime | None = Field(default=None)
