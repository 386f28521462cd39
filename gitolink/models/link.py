"""Link SQLAlchemy model."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gitolink.core.database import Base, utcnow

if TYPE_CHECKING:
    from gitolink.models.user import User


class Link(Base):
    """A single outbound entry on a user's profile."""

    __tablename__ = "links"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    url: Mapped[str] = mapped_column(Text, nullable=False)
    icon: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Social icon tag, e.g. 'github' or 'youtube'",
    )
    embed_type: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
        comment="Embed widget: 'youtube', 'instagram' or 'tiktok'",
    )
    order: Mapped[int] = mapped_column(
        default=0,
        nullable=False,
        comment="Position on the public profile (ascending)",
    )
    active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
        comment="Only active links are served to visitors",
    )

    # Cached Open-Graph metadata
    og_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    og_description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    og_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    og_cache_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Denormalized counters
    view_count: Mapped[int] = mapped_column(
        default=0,
        nullable=False,
        comment="Profile impressions (denormalized for quick access)",
    )
    click_count: Mapped[int] = mapped_column(
        default=0,
        nullable=False,
        comment="Total click count (denormalized for quick access)",
    )

    scheduled_at: Mapped[datetime | None] = mapped_column(
        nullable=True,
        comment="When an inactive link should be published",
    )
    expires_at: Mapped[datetime | None] = mapped_column(
        nullable=True,
        comment="When an active link should be hidden",
    )
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

    # Relationships
    user: Mapped["User"] = relationship(back_populates="links")

    __table_args__ = (
        Index("ix_links_user_id_order", "user_id", "order"),
    )

    def __repr__(self) -> str:
        return f"<Link {self.title} -> {self.url[:50]}>"
