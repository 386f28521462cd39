"""Test helpers shared across modules."""

from typing import Any
from uuid import UUID, uuid4

from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from gitolink.core.database import utcnow
from gitolink.models import Link, User
from gitolink.schemas.link import LinkCreate, LinkResponse
from gitolink.schemas.user import UserRegister
from gitolink.services import link_service, user_service

IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)
ANDROID_UA = (
    "Mozilla/5.0 (Linux; Android 13; Pixel 7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Mobile Safari/537.36"
)
IPAD_UA = (
    "Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)
WINDOWS_CHROME_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

PASSWORD = "correct-horse-battery"
OWNER_ID = UUID("00000000-0000-4000-8000-000000000001")


class FakeRedis:
    """Just enough of ``redis.asyncio.Redis`` for the OG metadata cache."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def setex(self, key: str, ttl: int, value: str) -> None:
        self.store[key] = value

    async def aclose(self) -> None:
        pass


async def register(
    client: AsyncClient,
    username: str = "alice",
    password: str = PASSWORD,
) -> dict[str, Any]:
    """Register through the API; the client keeps the session cookie."""
    response = await client.post(
        "/api/v1/auth/register",
        json={
            "username": username,
            "email": f"{username}@example.com",
            "password": password,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()["user"]


async def add_link(
    client: AsyncClient,
    title: str = "Portfolio",
    url: str = "https://example.com",
    **extra: Any,
) -> dict[str, Any]:
    response = await client.post("/api/v1/links", json={"title": title, "url": url, **extra})
    assert response.status_code == 201, response.text
    return response.json()["link"]


async def create_user(session: AsyncSession, username: str = "alice") -> User:
    """Create and commit a user through the service layer."""
    user = await user_service.create_user(
        session,
        UserRegister(username=username, email=f"{username}@example.com", password=PASSWORD),
    )
    await session.commit()
    return user


async def create_link(
    session: AsyncSession,
    user: User,
    title: str = "Portfolio",
    url: str = "https://example.com",
) -> Link:
    link = await link_service.create_link(session, user.id, LinkCreate(title=title, url=url))
    await session.commit()
    return link


async def stored_links(
    session_factory: async_sessionmaker[AsyncSession],
    user_id: str | UUID,
) -> list[Link]:
    """Read a user's links in a fresh session, ordered by position."""
    async with session_factory() as session:
        result = await session.execute(
            select(Link)
            .where(Link.user_id == UUID(str(user_id)))
            .order_by(Link.order.asc())
        )
        return list(result.scalars().all())


def link_response(title: str, order: int, **fields: Any) -> LinkResponse:
    """A server-shaped link for client-side tests."""
    now = utcnow()
    values: dict[str, Any] = {
        "id": uuid4(),
        "user_id": OWNER_ID,
        "title": title,
        "url": f"https://example.com/{title.lower()}",
        "icon": None,
        "embed_type": None,
        "order": order,
        "active": True,
        "view_count": 0,
        "click_count": 0,
        "created_at": now,
        "updated_at": now,
    }
    values.update(fields)
    return LinkResponse(**values)
