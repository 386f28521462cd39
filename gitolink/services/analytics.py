"""Aggregation queries over the clicks table.

Every query is a plain read scoped to either a user or a single link and to
a lookback window in days. Nothing is cached: each dashboard refresh runs
the queries again.
"""

from datetime import date, datetime, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy import and_, extract, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from gitolink.core.database import utcnow
from gitolink.models.click import Click
from gitolink.models.link import Link
from gitolink.schemas.analytics import (
    BrowserStats,
    DeviceStats,
    HourlyPoint,
    LinkAnalytics,
    LinkClickCount,
    LinkSummary,
    ReferrerStats,
    TimelinePoint,
    UserAnalytics,
)

UNKNOWN_LABEL = "Unknown"
DIRECT_LABEL = "Direct"


def window_start(days: int, now: datetime | None = None) -> datetime:
    """Start of a lookback window of ``days`` days ending now."""
    return (now or utcnow()) - timedelta(days=days)


def compute_ctr(click_count: int, view_count: int) -> float:
    """Click-through rate in percent from the denormalized counters."""
    if view_count <= 0:
        return 0
    return round(click_count / view_count * 100, 2)


def _click_filters(
    start: datetime,
    user_id: UUID | None = None,
    link_id: UUID | None = None,
) -> list[Any]:
    if (user_id is None) == (link_id is None):
        raise ValueError("Scope clicks by exactly one of user_id or link_id")
    scope = Click.user_id == user_id if user_id is not None else Click.link_id == link_id
    return [scope, Click.created_at >= start]


def _as_date_string(value: Any) -> str:
    """Normalise the day bucket: PostgreSQL yields ``date``, SQLite a string."""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


async def count_clicks(
    session: AsyncSession,
    start: datetime,
    *,
    user_id: UUID | None = None,
    link_id: UUID | None = None,
) -> int:
    """Number of clicks at or after ``start``."""
    result = await session.execute(
        select(func.count(Click.id)).where(*_click_filters(start, user_id, link_id))
    )
    return result.scalar() or 0


async def clicks_per_link(
    session: AsyncSession,
    user_id: UUID,
    start: datetime,
) -> list[LinkClickCount]:
    """Click count for every link the user owns, zero included."""
    count = func.count(Click.id)
    result = await session.execute(
        select(Link.id, Link.title, count.label("count"))
        .outerjoin(
            Click,
            and_(Click.link_id == Link.id, Click.created_at >= start),
        )
        .where(Link.user_id == user_id)
        .group_by(Link.id, Link.title, Link.order)
        .order_by(Link.order.asc())
    )
    return [
        LinkClickCount(link_id=row.id, title=row.title, count=row.count)
        for row in result.all()
    ]


async def _histogram(
    session: AsyncSession,
    column: InstrumentedAttribute,
    missing_label: str,
    filters: list[Any],
) -> list[tuple[str, int]]:
    """Group-by-count over ``column``; null and empty values share one bucket."""
    result = await session.execute(
        select(column.label("value"), func.count(Click.id).label("count"))
        .where(*filters)
        .group_by(column)
    )

    buckets: dict[str, int] = {}
    for row in result.all():
        label = row.value or missing_label
        buckets[label] = buckets.get(label, 0) + row.count

    return sorted(buckets.items(), key=lambda item: (-item[1], item[0]))


async def device_stats(
    session: AsyncSession,
    start: datetime,
    *,
    user_id: UUID | None = None,
    link_id: UUID | None = None,
) -> list[DeviceStats]:
    rows = await _histogram(
        session, Click.device, UNKNOWN_LABEL, _click_filters(start, user_id, link_id)
    )
    return [DeviceStats(device=label, count=count) for label, count in rows]


async def browser_stats(
    session: AsyncSession,
    start: datetime,
    *,
    user_id: UUID | None = None,
    link_id: UUID | None = None,
) -> list[BrowserStats]:
    rows = await _histogram(
        session, Click.browser, UNKNOWN_LABEL, _click_filters(start, user_id, link_id)
    )
    return [BrowserStats(browser=label, count=count) for label, count in rows]


async def referrer_stats(
    session: AsyncSession,
    start: datetime,
    *,
    user_id: UUID | None = None,
    link_id: UUID | None = None,
) -> list[ReferrerStats]:
    rows = await _histogram(
        session, Click.referrer, DIRECT_LABEL, _click_filters(start, user_id, link_id)
    )
    return [ReferrerStats(referrer=label, count=count) for label, count in rows]


async def timeline(
    session: AsyncSession,
    start: datetime,
    *,
    user_id: UUID | None = None,
    link_id: UUID | None = None,
) -> list[TimelinePoint]:
    """Clicks per calendar day, oldest first.

    Days are cut by the database's own ``date()`` so boundaries follow the
    database server's timezone.
    """
    day = func.date(Click.created_at)
    result = await session.execute(
        select(day.label("day"), func.count(Click.id).label("count"))
        .where(*_click_filters(start, user_id, link_id))
        .group_by(day)
        .order_by(day.asc())
    )
    return [
        TimelinePoint(date=_as_date_string(row.day), count=row.count)
        for row in result.all()
    ]


async def hourly_distribution(
    session: AsyncSession,
    start: datetime,
    *,
    user_id: UUID | None = None,
    link_id: UUID | None = None,
) -> list[HourlyPoint]:
    """Clicks grouped by hour of day (0-23) for heatmaps."""
    hour = extract("hour", Click.created_at)
    result = await session.execute(
        select(hour.label("hour"), func.count(Click.id).label("count"))
        .where(*_click_filters(start, user_id, link_id))
        .group_by(hour)
        .order_by(hour.asc())
    )
    return [
        HourlyPoint(hour=int(row.hour), count=row.count)
        for row in result.all()
    ]


async def get_user_analytics(
    session: AsyncSession,
    user_id: UUID,
    days: int,
) -> UserAnalytics:
    """Dashboard overview across every link the user owns."""
    start = window_start(days)
    return UserAnalytics(
        total_clicks=await count_clicks(session, start, user_id=user_id),
        clicks_per_link=await clicks_per_link(session, user_id, start),
        device_stats=await device_stats(session, start, user_id=user_id),
        browser_stats=await browser_stats(session, start, user_id=user_id),
        timeline_data=await timeline(session, start, user_id=user_id),
    )


async def get_link_analytics(
    session: AsyncSession,
    link: Link,
    days: int,
) -> LinkAnalytics:
    """Detailed analytics for one link, CTR taken from its counters."""
    start = window_start(days)
    return LinkAnalytics(
        link=LinkSummary(
            id=link.id,
            title=link.title,
            url=link.url,
            views=link.view_count,
            clicks=link.click_count,
        ),
        ctr=compute_ctr(link.click_count, link.view_count),
        total_clicks=await count_clicks(session, start, link_id=link.id),
        timeline_data=await timeline(session, start, link_id=link.id),
        device_stats=await device_stats(session, start, link_id=link.id),
        browser_stats=await browser_stats(session, start, link_id=link.id),
        referrer_stats=await referrer_stats(session, start, link_id=link.id),
        hourly_distribution=await hourly_distribution(session, start, link_id=link.id),
    )
