"""User service for database operations."""

from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from gitolink.core.security import hash_password, verify_password
from gitolink.models.user import User
from gitolink.schemas.user import UserRegister, UserUpdate

# Design columns have defaults and may not be cleared
NON_NULLABLE_FIELDS = frozenset({
    "theme",
    "background_type",
    "background_value",
    "layout",
    "font_family",
    "title_color",
    "button_style",
    "button_color",
})


async def get_user_by_id(session: AsyncSession, user_id: UUID) -> User | None:
    """Get a user by their ID."""
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_username(session: AsyncSession, username: str) -> User | None:
    """Get a user by their public username."""
    result = await session.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    """Get a user by their email address."""
    result = await session.execute(select(User).where(User.email == email.lower()))
    return result.scalar_one_or_none()


async def create_user(session: AsyncSession, user_data: UserRegister) -> User:
    """Create a new account.

    Raises ValueError if the username or email is already registered.
    """
    email = user_data.email.lower()
    result = await session.execute(
        select(User.id).where(
            or_(User.username == user_data.username, User.email == email)
        )
    )
    if result.first() is not None:
        raise ValueError("Username or email already taken")

    user = User(
        username=user_data.username,
        email=email,
        hashed_password=hash_password(user_data.password),
        name=user_data.name or user_data.username,
    )
    session.add(user)
    await session.flush()
    await session.refresh(user)
    return user


async def authenticate_user(
    session: AsyncSession,
    email: str,
    password: str,
) -> User | None:
    """Return the user when the email/password pair is valid."""
    user = await get_user_by_email(session, email)
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user


async def update_user(
    session: AsyncSession,
    user: User,
    user_data: UserUpdate,
) -> User:
    """Apply a partial profile/design update."""
    update_data = user_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None and field in NON_NULLABLE_FIELDS:
            continue
        setattr(user, field, value)
    await session.flush()
    await session.refresh(user)
    return user
