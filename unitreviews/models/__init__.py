"""
SQLModel Models - Database schema models.

For modifications:
1. Edit the appropriate model file in unitreviews/models/
2. Tables are created from SQLModel.metadata on startup
   (see unitreviews.core.database.create_db_and_tables)
"""

from unitreviews.models.notification import Notifications
from unitreviews.models.review import Reviews
from unitreviews.models.review_reaction import ReviewReactions
from unitreviews.models.setu import Setus
from unitreviews.models.unit import UnitOverviews, Units, UnitTags
from unitreviews.models.user import Users

__all__ = [
    # Core entity models
    "Users",
    "Units",
    "Reviews",
    # Junction/relationship tables
    "ReviewReactions",
    "UnitTags",
    "UnitOverviews",
    "Notifications",
    # Reference data
    "Setus",
]
