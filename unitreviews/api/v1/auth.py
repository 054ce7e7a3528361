"""
Authentication API endpoints.

This module provides endpoints for:
- Registration with email + password
- Login (JWT access token, also set as an HTTPOnly cookie)
- Current user profile
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from unitreviews.api.v1.users import build_user_response
from unitreviews.config import settings
from unitreviews.core.auth import CurrentUser
from unitreviews.core.database import get_db
from unitreviews.core.logging import get_logger
from unitreviews.core.security import create_access_token
from unitreviews.models.user import Users
from unitreviews.schemas.auth import LoginRequest, TokenResponse, UserRegisterRequest
from unitreviews.schemas.user import UserPrivateResponse
from unitreviews.services.users import authenticate_user, register_user

logger = get_logger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _issue_token(user: Users, response: Response) -> TokenResponse:
    assert user.user_id is not None
    access_token = create_access_token(user.user_id)
    response.set_cookie(
        key="access_token",
        value=access_token,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )
    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserRegisterRequest,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """
    Create an account and log it in.

    When no username is given one is derived from the email prefix.
    """
    user = await register_user(db, data)
    return _issue_token(user, response)


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: LoginRequest,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> TokenResponse:
    """
    Authenticate with email or username and password.

    The access token is returned in the body and also set as an HTTPOnly cookie.
    """
    user = await authenticate_user(db, credentials.username, credentials.password)
    if user is None:
        logger.info("login_failed", login=credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
        )

    logger.info("login_succeeded", user_id=user.user_id)
    return _issue_token(user, response)


@router.get("/me", response_model=UserPrivateResponse)
async def get_me(
    current_user: CurrentUser,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserPrivateResponse:
    """Profile of the logged-in user, including email."""
    public = await build_user_response(db, current_user)
    return UserPrivateResponse(
        **public.model_dump(),
        email=current_user.email,
        is_google_user=current_user.is_google_user,
    )
