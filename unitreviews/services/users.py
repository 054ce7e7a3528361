"""
User accounts: registration, login lookup and profile updates.
"""

import re
from dataclasses import dataclass, field
from datetime import timedelta

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.config import ReactionKind
from unitreviews.core.database import unit_of_work
from unitreviews.core.errors import AuthorizationError, ConflictError, NotFoundError
from unitreviews.core.logging import get_logger
from unitreviews.core.security import (
    generate_verification_token,
    get_password_hash,
    verify_password,
)
from unitreviews.models import ReviewReactions, Reviews, Users
from unitreviews.models.base import utc_now
from unitreviews.schemas.auth import UserRegisterRequest
from unitreviews.schemas.user import UserUpdate

logger = get_logger(__name__)

VERIFICATION_TOKEN_LIFETIME = timedelta(hours=24)

_USERNAME_UNSAFE = re.compile(r"[^a-z0-9._-]")


@dataclass
class UserActivity:
    """IDs of the reviews a user wrote, liked and disliked."""

    review_ids: list[int] = field(default_factory=list)
    liked_review_ids: list[int] = field(default_factory=list)
    disliked_review_ids: list[int] = field(default_factory=list)


def username_from_email(email: str) -> str:
    """Base username for an account: the email prefix, lowercased and sanitized."""
    prefix = email.split("@", 1)[0].lower()
    base = _USERNAME_UNSAFE.sub("", prefix)
    return base or "user"


async def derive_username(db: AsyncSession, email: str) -> str:
    """
    Pick a free username based on the email prefix.

    "jane@x.edu" gives "jane", or "jane1", "jane2"... if that is taken.
    """
    base = username_from_email(email)
    result = await db.execute(
        select(Users.username).where(  # type: ignore[call-overload]
            or_(Users.username == base, Users.username.like(f"{base}%"))  # type: ignore[attr-defined]
        )
    )
    taken = set(result.scalars().all())
    if base not in taken:
        return base

    suffix = 1
    while f"{base}{suffix}" in taken:
        suffix += 1
    return f"{base}{suffix}"


async def register_user(db: AsyncSession, data: UserRegisterRequest) -> Users:
    """
    Create a local (email + password) account.

    The username is derived from the email exactly once, here, when the
    request does not supply one.

    Raises:
        ConflictError: If the email or username is already registered
    """
    email = str(data.email).lower()

    async with unit_of_work(db):
        existing = await db.execute(
            select(Users.user_id).where(func.lower(Users.email) == email)  # type: ignore[call-overload]
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError("Email is already registered")

        if data.username:
            taken = await db.execute(
                select(Users.user_id).where(Users.username == data.username)  # type: ignore[call-overload]
            )
            if taken.scalar_one_or_none() is not None:
                raise ConflictError("Username is already taken")
            username = data.username
        else:
            username = await derive_username(db, email)

        _raw_token, token_hash = generate_verification_token()
        user = Users(
            username=username,
            email=email,
            password=get_password_hash(data.password),
            verification_token=token_hash,
            verification_token_expires=utc_now() + VERIFICATION_TOKEN_LIFETIME,
        )
        db.add(user)
        await db.flush()

    logger.info("user_registered", user_id=user.user_id, username=username)
    return user


async def authenticate_user(db: AsyncSession, login: str, password: str) -> Users | None:
    """
    Find the account for an email or username and check its password.

    Returns None for an unknown login, a wrong password or a Google-only
    account without a local password.
    """
    result = await db.execute(
        select(Users).where(
            or_(
                func.lower(Users.email) == login.lower(),
                Users.username == login,  # type: ignore[arg-type]
            )
        )
    )
    user = result.scalar_one_or_none()
    if user is None or not user.password:
        return None
    if not verify_password(password, user.password):
        return None
    return user


async def update_user(db: AsyncSession, user_id: int, actor: Users, data: UserUpdate) -> Users:
    """
    Update a user's public profile. Users may edit themselves; admins anyone.

    Raises:
        NotFoundError: If the user does not exist
        AuthorizationError: If actor is neither the user nor an admin
        ConflictError: If the new username is taken
    """
    async with unit_of_work(db):
        user = await db.get(Users, user_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.user_id != actor.user_id and not actor.admin:
            raise AuthorizationError("No permission to edit this user")

        changes = data.model_dump(exclude_unset=True)
        new_username = changes.get("username")
        if new_username and new_username != user.username:
            taken = await db.execute(
                select(Users.user_id).where(Users.username == new_username)  # type: ignore[call-overload]
            )
            if taken.scalar_one_or_none() is not None:
                raise ConflictError("Username is already taken")

        for key, value in changes.items():
            if key == "username" and not value:
                continue
            setattr(user, key, value)
        db.add(user)

    logger.info("user_updated", user_id=user_id, updated_by=actor.user_id, fields=sorted(changes))
    return user


async def get_user_activity(db: AsyncSession, user_id: int) -> UserActivity:
    """Collect the review, liked and disliked ID lists for a user profile."""
    reviews = await db.execute(
        select(Reviews.review_id)  # type: ignore[call-overload]
        .where(Reviews.user_id == user_id)
        .order_by(Reviews.review_id)
    )
    reactions = await db.execute(
        select(ReviewReactions.review_id, ReviewReactions.kind)  # type: ignore[call-overload]
        .where(ReviewReactions.user_id == user_id)
        .order_by(ReviewReactions.review_id)
    )

    activity = UserActivity(review_ids=list(reviews.scalars().all()))
    for review_id, kind in reactions.all():
        if kind == ReactionKind.LIKE:
            activity.liked_review_ids.append(review_id)
        else:
            activity.disliked_review_ids.append(review_id)
    return activity
