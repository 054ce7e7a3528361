"""
Authentication dependencies for FastAPI route protection.

This module provides dependency functions for:
- Extracting and verifying JWT tokens from requests
- Loading current user from database
- Protecting routes with authentication/admin requirements
"""

from typing import Annotated

from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.core.database import get_db
from unitreviews.core.logging import user_id_ctx
from unitreviews.core.security import verify_access_token
from unitreviews.models.user import Users


async def get_current_user_id(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(HTTPBearer(auto_error=False))] = None,
    access_token: Annotated[str | None, Cookie()] = None,
) -> int:
    """
    Extract and verify the JWT access token.

    The Authorization: Bearer header takes precedence over the access_token cookie.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired
    """
    token = credentials.credentials if credentials else access_token
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = verify_access_token(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user_id


async def get_current_user(
    user_id: Annotated[int, Depends(get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Users:
    """
    Load current user from database using verified token.

    Raises:
        HTTPException: 401 if user not found
    """
    result = await db.execute(select(Users).where(Users.user_id == user_id))  # type: ignore[arg-type]
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    user_id_ctx.set(user.user_id)
    return user


async def require_admin(
    current_user: Annotated[Users, Depends(get_current_user)],
) -> Users:
    """
    Require current user to be an admin.

    Raises:
        HTTPException: 403 if user is not an admin
    """
    if not current_user.admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required",
        )
    return current_user


# Type aliases for cleaner route signatures
CurrentUser = Annotated[Users, Depends(get_current_user)]
AdminUser = Annotated[Users, Depends(require_admin)]
