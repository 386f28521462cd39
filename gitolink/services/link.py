"""Link repository: ownership-scoped CRUD, ordering and scheduled publishing.

Every mutation filters on the owning user id as well as the link id, so a
forged id from another account never matches a row.
"""

from collections.abc import Sequence
from datetime import datetime, timezone
from uuid import UUID

import structlog
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from gitolink.core.database import utcnow
from gitolink.models.link import Link
from gitolink.schemas.link import LinkCreate, LinkUpdate

logger = structlog.get_logger()


class LinkNotFoundError(LookupError):
    """A referenced link does not exist or belongs to someone else."""


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Normalise an incoming timestamp to the naive UTC the columns store."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


async def get_link_by_id(
    session: AsyncSession,
    link_id: UUID,
    user_id: UUID | None = None,
) -> Link | None:
    """Get a link by its ID, optionally filtering by owner."""
    query = select(Link).where(Link.id == link_id)
    if user_id:
        query = query.where(Link.user_id == user_id)
    result = await session.execute(query)
    return result.scalar_one_or_none()


async def get_user_links(session: AsyncSession, user_id: UUID) -> list[Link]:
    """All of a user's links in display order."""
    result = await session.execute(
        select(Link)
        .where(Link.user_id == user_id)
        .order_by(Link.order.asc(), Link.created_at.asc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def get_active_links(session: AsyncSession, user_id: UUID) -> list[Link]:
    """The links visitors see: active only, ascending ``order``."""
    result = await session.execute(
        select(Link)
        .where(
            Link.user_id == user_id,
            Link.active == True,  # noqa: E712
        )
        .order_by(Link.order.asc(), Link.created_at.asc())
    )
    return list(result.scalars().all())


async def get_next_order(session: AsyncSession, user_id: UUID) -> int:
    """Position for a newly appended link (0 for the first one)."""
    result = await session.execute(
        select(func.max(Link.order)).where(Link.user_id == user_id)
    )
    max_order = result.scalar()
    return 0 if max_order is None else max_order + 1


async def create_link(
    session: AsyncSession,
    user_id: UUID,
    link_data: LinkCreate,
) -> Link:
    """Append a new link to the end of the user's list.

    A link scheduled for the future starts hidden until the publish sweep
    activates it.
    """
    scheduled_at = to_naive_utc(link_data.scheduled_at)
    link = Link(
        user_id=user_id,
        title=link_data.title,
        url=link_data.url,
        icon=link_data.icon,
        embed_type=link_data.embed_type,
        order=await get_next_order(session, user_id),
        active=scheduled_at is None or scheduled_at <= utcnow(),
        scheduled_at=scheduled_at,
        expires_at=to_naive_utc(link_data.expires_at),
    )
    session.add(link)
    await session.flush()
    await session.refresh(link)
    return link


async def update_link(
    session: AsyncSession,
    link: Link,
    link_data: LinkUpdate,
) -> Link:
    """Apply the fields present in the update to an owned link."""
    for field, value in link_data.changes().items():
        if field in ("scheduled_at", "expires_at"):
            value = to_naive_utc(value)
        setattr(link, field, value)
    await session.flush()
    await session.refresh(link)
    return link


async def reorder_links(
    session: AsyncSession,
    user_id: UUID,
    link_ids: Sequence[UUID],
) -> None:
    """Rewrite ``order`` to match the position of each id in ``link_ids``.

    Ownership of every id is checked before anything is written; the
    updates then share the caller's transaction so a reorder is applied
    entirely or not at all.

    Raises LinkNotFoundError if any id is unknown or owned by another user.
    """
    result = await session.execute(
        select(func.count(Link.id)).where(
            Link.id.in_(link_ids),
            Link.user_id == user_id,
        )
    )
    owned = result.scalar() or 0
    if owned != len(link_ids):
        raise LinkNotFoundError("Link not found")

    for index, link_id in enumerate(link_ids):
        update_result = await session.execute(
            update(Link)
            .where(Link.id == link_id, Link.user_id == user_id)
            .values(order=index, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if update_result.rowcount != 1:
            raise LinkNotFoundError("Link not found")

    await session.flush()


async def delete_link(session: AsyncSession, user_id: UUID, link_id: UUID) -> bool:
    """Permanently delete an owned link. Returns False if nothing matched."""
    result = await session.execute(
        delete(Link)
        .where(Link.id == link_id, Link.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0


async def increment_click_count(session: AsyncSession, link_id: UUID) -> None:
    """Bump the denormalized click counter in a single UPDATE."""
    await session.execute(
        update(Link)
        .where(Link.id == link_id)
        .values(click_count=Link.click_count + 1)
        .execution_options(synchronize_session=False)
    )


async def increment_view_counts(session: AsyncSession, link_ids: Sequence[UUID]) -> None:
    """Record one profile impression for each served link."""
    if not link_ids:
        return
    await session.execute(
        update(Link)
        .where(Link.id.in_(link_ids))
        .values(view_count=Link.view_count + 1)
        .execution_options(synchronize_session=False)
    )


async def publish_scheduled_links(
    session: AsyncSession,
    now: datetime | None = None,
) -> tuple[int, int]:
    """Activate links whose schedule has arrived and hide expired ones.

    Returns tuple of (published, expired).
    """
    now = now or utcnow()

    published = await session.execute(
        update(Link)
        .where(
            Link.scheduled_at.is_not(None),
            Link.scheduled_at <= now,
            Link.active == False,  # noqa: E712
            (Link.expires_at.is_(None)) | (Link.expires_at > now),
        )
        .values(active=True, scheduled_at=None, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    expired = await session.execute(
        update(Link)
        .where(
            Link.expires_at.is_not(None),
            Link.expires_at <= now,
            Link.active == True,  # noqa: E712
        )
        .values(active=False, updated_at=now)
        .execution_options(synchronize_session=False)
    )

    logger.info(
        "Scheduled links processed",
        published=published.rowcount,
        expired=expired.rowcount,
    )
    return published.rowcount, expired.rowcount
