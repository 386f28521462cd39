"""Create clicks table.

Revision ID: 003
Revises: 002
Create Date: 2026-10-19

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the append-only clicks table."""
    op.create_table(
        "clicks",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("link_id", sa.Uuid(), nullable=False),
        sa.Column(
            "user_id",
            sa.Uuid(),
            nullable=False,
            comment="Owner of the link (denormalized for per-user aggregation)",
        ),
        sa.Column(
            "ip",
            sa.String(45),
            nullable=False,
            comment="First hop of the forwarded-for chain, or 'unknown'",
        ),
        sa.Column("device", sa.String(20), nullable=True),
        sa.Column("browser", sa.String(100), nullable=True),
        sa.Column("os", sa.String(100), nullable=True),
        sa.Column("referrer", sa.Text(), nullable=True, comment="HTTP Referer header"),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            comment="Timestamp when the click occurred",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_clicks")),
        sa.ForeignKeyConstraint(
            ["link_id"],
            ["links.id"],
            name=op.f("fk_clicks_link_id_links"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name=op.f("fk_clicks_user_id_users"),
            ondelete="CASCADE",
        ),
    )
    op.create_index(op.f("ix_clicks_link_id"), "clicks", ["link_id"])
    op.create_index(op.f("ix_clicks_user_id"), "clicks", ["user_id"])
    op.create_index(op.f("ix_clicks_created_at"), "clicks", ["created_at"])
    op.create_index("ix_clicks_user_id_created_at", "clicks", ["user_id", "created_at"])
    op.create_index("ix_clicks_link_id_created_at", "clicks", ["link_id", "created_at"])


def downgrade() -> None:
    """Drop the clicks table."""
    op.drop_index("ix_clicks_link_id_created_at", table_name="clicks")
    op.drop_index("ix_clicks_user_id_created_at", table_name="clicks")
    op.drop_index(op.f("ix_clicks_created_at"), table_name="clicks")
    op.drop_index(op.f("ix_clicks_user_id"), table_name="clicks")
    op.drop_index(op.f("ix_clicks_link_id"), table_name="clicks")
    op.drop_table("clicks")
