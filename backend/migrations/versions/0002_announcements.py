"""Add announcements table

Revision ID: 0002_announcements
Revises: 0001_initial
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa

revision = "0002_announcements"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "announcements",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("content", sa.String(1000), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("is_published", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_announcements_user_id", "announcements", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_announcements_user_id", table_name="announcements")
    op.drop_table("announcements")
