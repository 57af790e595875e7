import logging
import uuid

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.security import create_access_token, create_refresh_token, decode_token
from app.database import get_db
from app.models.user import User
from app.schemas.user import (
    ProfileResponse,
    TokenResponse,
    UserLoginRequest,
    UserRegisterRequest,
)
from app.services.auth_service import (
    authenticate_user,
    create_user,
    get_profile,
    get_user_by_id,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

REFRESH_COOKIE = {
    "key": "refresh_token",
    "path": "/api/v1/auth",
    "httponly": True,
    "samesite": "lax",
}


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _start_session(response: Response, user_id: uuid.UUID) -> str:
    """Set a fresh refresh cookie and return a new access token."""
    response.set_cookie(
        value=create_refresh_token(user_id),
        secure=not settings.DEBUG,
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
        **REFRESH_COOKIE,
    )
    return create_access_token(user_id)


def _end_session(response: Response) -> None:
    response.delete_cookie(secure=not settings.DEBUG, **REFRESH_COOKIE)


@router.post("/register", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: UserRegisterRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    user = await create_user(db, data)
    logger.info("Registered user %s", user.id)

    response.headers["X-Access-Token"] = _start_session(response, user.id)
    return await get_profile(db, user)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: UserLoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    user = await authenticate_user(db, data.email, data.password)
    if user is None:
        raise _unauthorized("Incorrect email or password")
    _ensure_active(user)

    return TokenResponse(access_token=_start_session(response, user.id))


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    response: Response,
    refresh_token: str | None = Cookie(default=None),
    db: AsyncSession = Depends(get_db),
):
    if refresh_token is None:
        raise _unauthorized("Refresh token missing")

    try:
        user_id = decode_token(refresh_token, expected_type="refresh")
    except JWTError:
        _end_session(response)
        raise _unauthorized("Invalid or expired refresh token")

    user = await get_user_by_id(db, user_id)
    if user is None or not user.is_active:
        logger.warning("Refresh rejected for missing or inactive user %s", user_id)
        _end_session(response)
        raise _unauthorized("User not found or inactive")

    return TokenResponse(access_token=_start_session(response, user.id))


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response):
    _end_session(response)


def _ensure_active(user: User) -> None:
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user account",
        )
