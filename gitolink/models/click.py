"""Click SQLAlchemy model for storing raw click events."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from gitolink.core.database import Base, utcnow


class Click(Base):
    """Click model for storing raw click events.

    Each row represents a single visitor click on a profile link. Rows are
    append-only: nothing updates or deletes them once written.
    """

    __tablename__ = "clicks"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    link_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("links.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owner of the link (denormalized for per-user aggregation)",
    )
    ip: Mapped[str] = mapped_column(
        String(45),
        nullable=False,
        comment="First hop of the forwarded-for chain, or 'unknown'",
    )
    device: Mapped[str | None] = mapped_column(String(20), nullable=True)
    browser: Mapped[str | None] = mapped_column(String(100), nullable=True)
    os: Mapped[str | None] = mapped_column(String(100), nullable=True)
    referrer: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="HTTP Referer header",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utcnow,
        nullable=False,
        index=True,
        comment="Timestamp when the click occurred",
    )

    # Composite indexes for windowed aggregation
    __table_args__ = (
        Index("ix_clicks_user_id_created_at", "user_id", "created_at"),
        Index("ix_clicks_link_id_created_at", "link_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Click {self.id} link={self.link_id} at={self.created_at}>"
