"""Click recorder: validates a visitor click and stores it enriched."""

from dataclasses import dataclass
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from gitolink.models.click import Click
from gitolink.models.link import Link
from gitolink.services.link import LinkNotFoundError, increment_click_count
from gitolink.services.user import get_user_by_username
from gitolink.services.user_agent import parse_user_agent

logger = structlog.get_logger()

UNKNOWN_IP = "unknown"


class ProfileNotFoundError(LookupError):
    """No user has the requested username."""


@dataclass
class ClickContext:
    """Request metadata captured alongside a click."""

    ip: str | None = None
    user_agent: str | None = None
    referrer: str | None = None


async def record_click(
    session: AsyncSession,
    username: str,
    link_id: UUID,
    context: ClickContext,
) -> Click:
    """Persist one click on ``link_id`` from the profile of ``username``.

    The link must be active and owned by the profile's user; a link id from
    any other account is reported exactly like a missing one. Also bumps the
    link's denormalized click counter. ``active`` and ``order`` are never
    touched.

    Raises:
        ProfileNotFoundError: unknown username
        LinkNotFoundError: link missing, inactive or owned by someone else
    """
    user = await get_user_by_username(session, username)
    if user is None:
        raise ProfileNotFoundError("User not found")

    result = await session.execute(
        select(Link.id).where(
            Link.id == link_id,
            Link.user_id == user.id,
            Link.active == True,  # noqa: E712
        )
    )
    if result.scalar_one_or_none() is None:
        raise LinkNotFoundError("Link not found")

    agent = parse_user_agent(context.user_agent)
    click = Click(
        link_id=link_id,
        user_id=user.id,
        ip=(context.ip or UNKNOWN_IP)[:45],
        device=agent.device,
        browser=agent.browser,
        os=agent.os,
        referrer=context.referrer or None,
    )
    session.add(click)
    await increment_click_count(session, link_id)
    await session.flush()

    logger.debug(
        "Click stored",
        link_id=str(link_id),
        device=agent.device,
        browser=agent.browser,
    )
    return click
