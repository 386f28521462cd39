"""Create links table.

Revision ID: 002
Revises: 001
Create Date: 2026-10-19

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the links table."""
    op.create_table(
        "links",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column(
            "icon",
            sa.String(50),
            nullable=True,
            comment="Social icon tag, e.g. 'github' or 'youtube'",
        ),
        sa.Column(
            "embed_type",
            sa.String(20),
            nullable=True,
            comment="Embed widget: 'youtube', 'instagram' or 'tiktok'",
        ),
        sa.Column(
            "order",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Position on the public profile (ascending)",
        ),
        sa.Column(
            "active",
            sa.Boolean(),
            nullable=False,
            server_default=sa.true(),
            comment="Only active links are served to visitors",
        ),
        sa.Column("og_title", sa.String(200), nullable=True),
        sa.Column("og_description", sa.String(500), nullable=True),
        sa.Column("og_image", sa.Text(), nullable=True),
        sa.Column("og_cache_at", sa.DateTime(), nullable=True),
        sa.Column(
            "view_count",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Profile impressions (denormalized for quick access)",
        ),
        sa.Column(
            "click_count",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("0"),
            comment="Total click count (denormalized for quick access)",
        ),
        sa.Column(
            "scheduled_at",
            sa.DateTime(),
            nullable=True,
            comment="When an inactive link should be published",
        ),
        sa.Column(
            "expires_at",
            sa.DateTime(),
            nullable=True,
            comment="When an active link should be hidden",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_links")),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name=op.f("fk_links_user_id_users"),
            ondelete="CASCADE",
        ),
    )
    op.create_index(op.f("ix_links_user_id"), "links", ["user_id"])
    op.create_index("ix_links_user_id_order", "links", ["user_id", "order"])


def downgrade() -> None:
    """Drop the links table."""
    op.drop_index("ix_links_user_id_order", table_name="links")
    op.drop_index(op.f("ix_links_user_id"), table_name="links")
    op.drop_table("links")
