"""Public profile and click ingestion schemas."""

from uuid import UUID

from gitolink.schemas.base import ApiModel
from gitolink.schemas.link import PublicLink
from gitolink.schemas.user import PublicUser


class ProfileResponse(ApiModel):
    """Public projection of a profile with its active links."""

    user: PublicUser
    links: list[PublicLink]


class ClickCreate(ApiModel):
    """Payload sent when a visitor clicks a profile link."""

    link_id: UUID
