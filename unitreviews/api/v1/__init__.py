"""
API v1 Router
"""

from fastapi import APIRouter

from unitreviews.api.v1 import auth, notifications, reviews, setus, units, users

router = APIRouter()

# Include all endpoint routers
router.include_router(auth.router)
router.include_router(units.router)
router.include_router(reviews.router)
router.include_router(users.router)
router.include_router(notifications.router)
router.include_router(setus.router)

__all__ = ["router"]
