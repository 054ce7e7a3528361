"""
Test data helpers shared by the test modules.

Usage:
    from tests.factories import auth_headers, make_review, make_unit, make_user
"""

from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.core.security import create_access_token
from unitreviews.models import Reviews, Units, Users
from unitreviews.schemas.review import ReviewCreate
from unitreviews.services.reviews import create_review


async def make_user(
    db_session: AsyncSession,
    username: str,
    admin: bool = False,
    profile_img: str | None = None,
) -> Users:
    """Create and commit a user (no password; use the auth tests for login)."""
    user = Users(
        username=username,
        email=f"{username}@student.example.edu",
        admin=admin,
        profile_img=profile_img,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


async def make_unit(db_session: AsyncSession, unit_code: str, name: str | None = None) -> Units:
    unit = Units(unit_code=unit_code, name=name or f"Unit {unit_code.upper()}")
    db_session.add(unit)
    await db_session.commit()
    await db_session.refresh(unit)
    return unit


def review_payload(**overrides) -> dict:
    """Valid review body for POST /reviews/unit/{code} or ReviewCreate(**...)."""
    payload = {
        "title": "Solid intro unit",
        "semester": 1,
        "year": 2024,
        "grade": 85,
        "overall_rating": 4,
        "relevancy_rating": 4,
        "faculty_rating": 3,
        "content_rating": 5,
        "description": "Good lectures and fair assessments.",
    }
    payload.update(overrides)
    return payload


async def make_review(
    db_session: AsyncSession,
    unit: Units,
    author: Users,
    **ratings,
) -> Reviews:
    """Create a review through the service so unit aggregates stay correct."""
    data = ReviewCreate(**review_payload(**ratings))
    return await create_review(db_session, unit.unit_code, author, data)


def auth_headers(user: Users) -> dict[str, str]:
    """Authorization header carrying a valid access token for user."""
    assert user.user_id is not None
    return {"Authorization": f"Bearer {create_access_token(user.user_id)}"}


