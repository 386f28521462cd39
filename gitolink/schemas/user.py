"""User Pydantic schemas."""

import re
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from gitolink.schemas.base import ApiModel

VALID_THEMES = (
    "cyberpunk", "matrix", "sunset", "tropical", "desert", "corporate",
    "minimal", "executive", "aurora", "cotton-candy", "retro", "forest",
    "ocean", "lavender", "gold", "rose-gold", "midnight", "glass", "rainbow",
)

HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")

Layout = Literal["classic", "hero", "minimal"]
ButtonStyle = Literal["rounded", "pill", "square", "glass"]
BackgroundType = Literal["gradient", "solid", "image"]


class UserRegister(ApiModel):
    """Schema for creating an account."""

    username: str = Field(min_length=3, max_length=30, pattern=r"^[A-Za-z0-9_]+$")
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    name: str | None = Field(default=None, max_length=255)


class UserLogin(ApiModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str = Field(min_length=1, max_length=128)


class UserUpdate(ApiModel):
    """Profile and design settings; every field is optional."""

    name: str | None = Field(default=None, max_length=255)
    bio: str | None = Field(default=None, max_length=500)
    avatar_url: str | None = None
    theme: str | None = None
    background_type: BackgroundType | None = None
    background_value: str | None = None
    custom_css: str | None = Field(default=None, max_length=10_000)
    layout: Layout | None = None
    font_family: str | None = Field(default=None, max_length=100)
    title_color: str | None = None
    button_style: ButtonStyle | None = None
    button_color: str | None = None

    @field_validator("theme")
    @classmethod
    def validate_theme(cls, v: str | None) -> str | None:
        if v is not None and v not in VALID_THEMES:
            raise ValueError("Invalid theme")
        return v

    @field_validator("title_color", "button_color")
    @classmethod
    def validate_hex_color(cls, v: str | None) -> str | None:
        if v is not None and not HEX_COLOR.match(v):
            raise ValueError("must be hex #RRGGBB")
        return v


class PublicUser(ApiModel):
    """The profile fields visitors are allowed to see."""

    username: str
    name: str | None
    bio: str | None
    avatar_url: str | None
    theme: str
    background_type: str
    background_value: str
    custom_css: str | None
    layout: str
    font_family: str
    title_color: str
    button_style: str
    button_color: str


class UserResponse(PublicUser):
    """Schema for the signed-in user's own profile."""

    id: UUID
    email: str
    created_at: datetime
    updated_at: datetime


class UserEnvelope(ApiModel):
    """``{"user": ...}`` wrapper."""

    user: UserResponse
