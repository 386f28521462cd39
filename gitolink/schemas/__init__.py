"""Pydantic schemas."""

from gitolink.schemas.base import ApiModel, SuccessResponse
from gitolink.schemas.user import (
    PublicUser,
    UserEnvelope,
    UserLogin,
    UserRegister,
    UserResponse,
    UserUpdate,
)
from gitolink.schemas.link import (
    LinkCreate,
    LinkEnvelope,
    LinkListResponse,
    LinkPatch,
    LinkReorder,
    LinkResponse,
    LinkUpdate,
    PublicLink,
    PublishResult,
)
from gitolink.schemas.profile import ClickCreate, ProfileResponse
from gitolink.schemas.analytics import (
    BrowserStats,
    DeviceStats,
    HourlyPoint,
    LinkAnalytics,
    LinkClickCount,
    LinkSummary,
    OgMetadata,
    OgMetadataResponse,
    ReferrerStats,
    TimelinePoint,
    UserAnalytics,
)

__all__ = [
    "ApiModel",
    "SuccessResponse",
    "PublicUser",
    "UserEnvelope",
    "UserLogin",
    "UserRegister",
    "UserResponse",
    "UserUpdate",
    "LinkCreate",
    "LinkEnvelope",
    "LinkListResponse",
    "LinkPatch",
    "LinkReorder",
    "LinkResponse",
    "LinkUpdate",
    "PublicLink",
    "PublishResult",
    "ClickCreate",
    "ProfileResponse",
    "BrowserStats",
    "DeviceStats",
    "HourlyPoint",
    "LinkAnalytics",
    "LinkClickCount",
    "LinkSummary",
    "OgMetadata",
    "OgMetadataResponse",
    "ReferrerStats",
    "TimelinePoint",
    "UserAnalytics",
]
