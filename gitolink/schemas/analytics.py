"""Pydantic schemas for analytics API responses."""

from uuid import UUID

from pydantic import Field

from gitolink.schemas.base import ApiModel


class LinkClickCount(ApiModel):
    """Clicks on one link within the window."""

    link_id: UUID
    title: str
    count: int


class DeviceStats(ApiModel):
    device: str = Field(description="'mobile', 'tablet', 'desktop' or 'Unknown'")
    count: int


class BrowserStats(ApiModel):
    browser: str
    count: int


class ReferrerStats(ApiModel):
    referrer: str = Field(description="Referer header, or 'Direct' when absent")
    count: int


class TimelinePoint(ApiModel):
    """Clicks on one calendar day (database server timezone)."""

    date: str = Field(description="YYYY-MM-DD")
    count: int


class HourlyPoint(ApiModel):
    hour: int = Field(ge=0, le=23)
    count: int


class UserAnalytics(ApiModel):
    """Dashboard analytics across all of a user's links."""

    total_clicks: int
    clicks_per_link: list[LinkClickCount]
    device_stats: list[DeviceStats]
    browser_stats: list[BrowserStats]
    timeline_data: list[TimelinePoint]


class LinkSummary(ApiModel):
    """Link identity plus its denormalized counters."""

    id: UUID
    title: str
    url: str
    views: int
    clicks: int


class LinkAnalytics(ApiModel):
    """Analytics for a single link."""

    link: LinkSummary
    ctr: float = Field(description="clicks / views * 100, rounded to 2 places")
    total_clicks: int
    timeline_data: list[TimelinePoint]
    device_stats: list[DeviceStats]
    browser_stats: list[BrowserStats]
    referrer_stats: list[ReferrerStats]
    hourly_distribution: list[HourlyPoint]


class OgMetadata(ApiModel):
    """Open-Graph preview of a link destination."""

    title: str = ""
    description: str = ""
    image: str = ""


class OgMetadataResponse(ApiModel):
    metadata: OgMetadata
