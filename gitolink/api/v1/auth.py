"""Authentication endpoints: register, login, logout and the profile owner."""

import structlog
from fastapi import APIRouter, HTTPException, Request, Response, status

from gitolink.core.config import get_settings
from gitolink.core.deps import AUTH_COOKIE_NAME, CurrentUser, SessionDep
from gitolink.core.rate_limit import RATE_LIMIT_API, RATE_LIMIT_AUTH, limiter
from gitolink.core.security import create_cookie_token
from gitolink.models.user import User
from gitolink.schemas.base import SuccessResponse
from gitolink.schemas.user import (
    UserEnvelope,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
)
from gitolink.services import user_service

settings = get_settings()
logger = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["auth"])


def _set_auth_cookie(response: Response, user: User) -> None:
    token_value, max_age = create_cookie_token(user.id, user.email, user.username)
    response.set_cookie(
        key=AUTH_COOKIE_NAME,
        value=token_value,
        max_age=max_age,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        path="/",
    )


@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMIT_AUTH)
async def register(
    request: Request,
    response: Response,
    user_data: UserRegister,
    session: SessionDep,
) -> UserEnvelope:
    """Create an account and sign it in."""
    try:
        user = await user_service.create_user(session, user_data)
        await session.commit()
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )

    logger.info("User registered", user_id=str(user.id), username=user.username)
    _set_auth_cookie(response, user)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.post("/login", response_model=UserEnvelope)
@limiter.limit(RATE_LIMIT_AUTH)
async def login(
    request: Request,
    response: Response,
    credentials: UserLogin,
    session: SessionDep,
) -> UserEnvelope:
    """Exchange email and password for the session cookie."""
    user = await user_service.authenticate_user(
        session,
        credentials.email,
        credentials.password,
    )
    if user is None:
        logger.info("Login failed", email=credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    logger.info("Login successful", user_id=str(user.id))
    _set_auth_cookie(response, user)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.post("/logout", response_model=SuccessResponse)
async def logout(response: Response) -> SuccessResponse:
    """Log out the current user by clearing the auth cookie."""
    response.delete_cookie(
        key=AUTH_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
    )
    return SuccessResponse()


@router.get("/me", response_model=UserEnvelope)
async def get_current_user_info(user: CurrentUser) -> UserEnvelope:
    """Get the current authenticated user's profile."""
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.put("/me", response_model=UserEnvelope)
@limiter.limit(RATE_LIMIT_API)
async def update_current_user(
    request: Request,
    user_data: UserUpdate,
    user: CurrentUser,
    session: SessionDep,
) -> UserEnvelope:
    """Update profile and design settings."""
    updated = await user_service.update_user(session, user, user_data)
    await session.commit()

    logger.info(
        "Profile updated",
        user_id=str(user.id),
        fields=sorted(user_data.model_fields_set),
    )
    return UserEnvelope(user=UserResponse.model_validate(updated))
