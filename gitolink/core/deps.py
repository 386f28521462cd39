"""Dependency injection utilities for FastAPI routes."""

from typing import Annotated

from fastapi import Cookie, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gitolink.core.database import get_async_session
from gitolink.core.security import decode_access_token
from gitolink.models.user import User

# Cookie name for auth token
AUTH_COOKIE_NAME = "gitolink_token"


async def get_token_from_cookie(
    gitolink_token: Annotated[str | None, Cookie()] = None,
) -> str | None:
    """Extract auth token from httpOnly cookie."""
    return gitolink_token


async def get_current_user(
    session: Annotated[AsyncSession, Depends(get_async_session)],
    token: Annotated[str | None, Depends(get_token_from_cookie)],
) -> User:
    """Get current authenticated user.

    Raises HTTPException 401 when the cookie is missing, does not decode,
    or names a user that no longer exists.
    """
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    token_data = decode_access_token(token)
    if token_data is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )

    result = await session.execute(select(User).where(User.id == token_data.user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    return user


# Type aliases for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
SessionDep = Annotated[AsyncSession, Depends(get_async_session)]
