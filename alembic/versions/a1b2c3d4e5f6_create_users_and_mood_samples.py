"""Create users and mood_samples tables.

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-17
"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create users and mood_samples."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(32), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("token", sa.String(128), nullable=False),
        sa.Column("custom_labels", sa.JSON(), nullable=True),
        sa.Column("custom_colors", sa.JSON(), nullable=True),
        sa.Column("is_profile_private", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_history_private", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("stats_mood_sets", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_token", "users", ["token"], unique=True)

    op.create_table(
        "mood_samples",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("timestamp", sa.BigInteger(), nullable=False),
        sa.Column("pleasantness", sa.Float(), nullable=False),
        sa.Column("energy", sa.Float(), nullable=False),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    op.create_index("ix_mood_samples_user_id", "mood_samples", ["user_id"])
    op.create_index("ix_mood_samples_timestamp", "mood_samples", ["timestamp"])


def downgrade() -> None:
    """Drop mood_samples and users."""
    op.drop_index("ix_mood_samples_timestamp", table_name="mood_samples")
    op.drop_index("ix_mood_samples_user_id", table_name="mood_samples")
    op.drop_table("mood_samples")
    op.drop_index("ix_users_token", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
