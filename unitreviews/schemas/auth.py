"""
Authentication schemas for request/response validation.

This module defines Pydantic models for authentication-related API operations:
- Login credentials
- Token responses
- User registration
"""

from pydantic import BaseModel, EmailStr, Field, field_validator

from unitreviews.core.security import validate_password_strength


class LoginRequest(BaseModel):
    """Request schema for user login (by email or username)."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)  # Allow any length for existing users


class TokenResponse(BaseModel):
    """Response schema for successful authentication."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token expiration time in seconds from now")


class UserRegisterRequest(BaseModel):
    """
    Request schema for user registration.

    username is optional; when omitted it is derived from the email prefix.
    """

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=255)
    username: str | None = Field(default=None, min_length=3, max_length=64)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Validate password strength."""
        is_valid, error_message = validate_password_strength(v)
        if not is_valid:
            raise ValueError(error_message)
        return v
