"""Create users and searches tables.

Revision ID: 001_users_searches
Revises:
Create Date: 2026-10-17

users holds the account, its credential encoding, theme preference and
any pending password reset. searches is the insert-only history, indexed
for newest-first reads per user.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "001_users_searches"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create users, searches and the history index."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column(
            "theme",
            sa.String(10),
            nullable=False,
            server_default=sa.text("'system'"),
        ),
        sa.Column("reset_token", sa.String(64), nullable=True),
        sa.Column("reset_expires", sa.BigInteger(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint(
            "theme IN ('system', 'light', 'dark')",
            name="ck_users_theme",
        ),
    )

    op.create_table(
        "searches",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("city", sa.String(255), nullable=False),
        sa.Column(
            "lang",
            sa.String(5),
            nullable=False,
            server_default=sa.text("'en'"),
        ),
        sa.Column("created_at", sa.BigInteger(), nullable=False),
    )
    op.create_index(
        "idx_searches_user_time",
        "searches",
        ["user_id", sa.text("created_at DESC")],
    )


def downgrade() -> None:
    """Drop searches then users."""
    op.drop_index("idx_searches_user_time", table_name="searches")
    op.drop_table("searches")
    op.drop_table("users")
