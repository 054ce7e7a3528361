"""
SQLModel-based User models with inheritance for security

This module defines the Users database model using SQLModel, which combines
SQLAlchemy and Pydantic functionality. The inheritance structure is:

UserBase (shared public fields)
    ├─> Users (database table, adds internal/sensitive fields)
    └─> UserCreate/UserUpdate/UserResponse (API schemas, defined in unitreviews/schemas)

A user's owned reviews, liked/disliked reviews and notifications are not
stored on this row; they are the rows of reviews, review_reactions and
notifications that reference user_id.
"""

from datetime import datetime

from sqlalchemy import Index
from sqlmodel import Field, SQLModel

from unitreviews.models.base import utc_now


class UserBase(SQLModel):
    """
    Base model with shared public fields for Users.

    These fields are safe to expose via the API.
    """

    username: str = Field(max_length=64)

    # Profile image URL or stored avatar filename
    profile_img: str | None = Field(default=None, max_length=512)


class Users(UserBase, table=True):
    """
    Database table for users with internal and sensitive fields.

    Internal/sensitive fields (should NOT be exposed via public API):
    - password: bcrypt hash
    - email: Privacy-sensitive
    - google_id: External identity
    - verification_* / reset_password_*: Security tokens and rate limit counters
    """

    __tablename__ = "users"

    __table_args__ = (
        Index("idx_users_username", "username", unique=True),
        Index("idx_users_email", "email", unique=True),
    )

    # Primary key
    user_id: int | None = Field(default=None, primary_key=True)

    # Contact info (privacy-sensitive)
    email: str = Field(max_length=255)

    # Authentication (highly sensitive - never expose)
    # Null for accounts created through Google sign-in
    password: str | None = Field(default=None, max_length=255)
    is_google_user: bool = Field(default=False)
    google_id: str | None = Field(default=None, max_length=255)

    # Access control
    admin: bool = Field(default=False)

    # Email verification
    verified: bool = Field(default=False)
    verification_token: str | None = Field(default=None, max_length=255)
    verification_token_expires: datetime | None = Field(default=None)

    # Password reset, with per-user request throttling
    reset_password_token: str | None = Field(default=None, max_length=255)
    reset_password_expires: datetime | None = Field(default=None)
    reset_password_attempts: int = Field(default=0)
    last_reset_password_request: datetime | None = Field(default=None)

    # Public timestamp
    date_joined: datetime = Field(default_factory=utc_now)

    # Note: Relationships are intentionally omitted.
    # Foreign keys are sufficient for queries, and omitting relationships avoids
    # accidental eager loading and unwanted auto-serialization in API responses.
