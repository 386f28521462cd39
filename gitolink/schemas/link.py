"""Link Pydantic schemas."""

from datetime import datetime
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import (
    AfterValidator,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from gitolink.schemas.base import ApiModel

EmbedType = Literal["youtube", "instagram", "tiktok"]

# Fields an update may omit but never set to null
NON_NULLABLE_UPDATE_FIELDS = ("title", "url", "active")

_http_url = TypeAdapter(HttpUrl)


def _check_http_url(value: str) -> str:
    """Validate as an http(s) URL but keep the text exactly as typed."""
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError("Input should be a valid http or https URL") from None
    return value


LinkUrl = Annotated[str, AfterValidator(_check_http_url)]


class LinkCreate(ApiModel):
    """Schema for adding a link to the profile."""

    title: str = Field(min_length=1, max_length=100)
    url: LinkUrl = Field(description="Destination opened when a visitor clicks")
    icon: str | None = Field(default=None, max_length=50)
    embed_type: EmbedType | None = None
    scheduled_at: datetime | None = Field(
        default=None,
        description="Publish at this time; the link stays hidden until then",
    )
    expires_at: datetime | None = Field(default=None, description="Hide after this time")


class LinkUpdate(ApiModel):
    """Field update variant of ``PATCH /links/{id}``."""

    op: Literal["update"] = "update"
    title: str | None = Field(default=None, min_length=1, max_length=100)
    url: LinkUrl | None = None
    icon: str | None = Field(default=None, max_length=50)
    active: bool | None = None
    embed_type: EmbedType | None = None
    scheduled_at: datetime | None = None
    expires_at: datetime | None = None

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "LinkUpdate":
        for field in NON_NULLABLE_UPDATE_FIELDS:
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self

    def changes(self) -> dict:
        """The fields the caller actually sent, ready to apply to the row."""
        return self.model_dump(exclude_unset=True, exclude={"op"})


class LinkReorder(ApiModel):
    """Reorder variant of ``PATCH /links/{id}``: the full new sequence."""

    op: Literal["reorder"] = "reorder"
    link_ids: list[UUID] = Field(min_length=1)

    @field_validator("link_ids")
    @classmethod
    def validate_unique(cls, v: list[UUID]) -> list[UUID]:
        if len(set(v)) != len(v):
            raise ValueError("link ids must be unique")
        return v


# Discriminated on ``op`` wherever it is parsed
LinkPatch = Union[LinkUpdate, LinkReorder]


class LinkResponse(ApiModel):
    """Schema for a link as its owner sees it."""

    id: UUID
    user_id: UUID
    title: str
    url: str
    icon: str | None
    embed_type: str | None
    order: int
    active: bool
    view_count: int
    click_count: int
    og_title: str | None = None
    og_description: str | None = None
    og_image: str | None = None
    scheduled_at: datetime | None = None
    expires_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class LinkEnvelope(ApiModel):
    """``{"link": ...}`` wrapper."""

    link: LinkResponse


class LinkListResponse(ApiModel):
    """All of the owner's links in display order."""

    links: list[LinkResponse]


class PublicLink(ApiModel):
    """A link as served on the public profile."""

    id: UUID
    title: str
    url: str
    icon: str | None
    embed_type: str | None


class PublishResult(ApiModel):
    """Outcome of a scheduled publish/expire sweep."""

    published: int
    expired: int
