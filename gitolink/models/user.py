"""User SQLAlchemy model."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gitolink.core.database import Base, utcnow

if TYPE_CHECKING:
    from gitolink.models.link import Link


class User(Base):
    """Account identity plus the public profile's display and design settings."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    username: Mapped[str] = mapped_column(
        String(30),
        unique=True,
        nullable=False,
        index=True,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Design
    theme: Mapped[str] = mapped_column(String(50), default="cyberpunk", nullable=False)
    background_type: Mapped[str] = mapped_column(
        String(20),
        default="gradient",
        nullable=False,
        comment="One of 'gradient', 'solid' or 'image'",
    )
    background_value: Mapped[str] = mapped_column(Text, default="", nullable=False)
    custom_css: Mapped[str | None] = mapped_column(Text, nullable=True)
    layout: Mapped[str] = mapped_column(String(20), default="classic", nullable=False)
    font_family: Mapped[str] = mapped_column(String(100), default="Inter", nullable=False)
    title_color: Mapped[str] = mapped_column(String(7), default="#FFFFFF", nullable=False)
    button_style: Mapped[str] = mapped_column(String(20), default="rounded", nullable=False)
    button_color: Mapped[str] = mapped_column(String(7), default="#FFFFFF", nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        default=utcnow,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=utcnow,
        server_default=func.now(),
        onupdate=utcnow,
        nullable=False,
    )

    links: Mapped[list["Link"]] = relationship(
        back_populates="user",
        order_by="Link.order",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<User {self.username}>"
