"""Initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # System status table (one row per user)
    op.create_table(
        "system_status",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("is_running", sa.Boolean(), nullable=True),
        sa.Column("current_task", sa.String(255), nullable=True),
        sa.Column("replays_found", sa.Integer(), nullable=True),
        sa.Column("videos_uploaded", sa.Integer(), nullable=True),
        sa.Column("last_activity", sa.DateTime(timezone=True), nullable=True),
        sa.Column("uptime", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", name="uq_system_status_user_id"),
    )
    op.create_index("ix_system_status_user_id", "system_status", ["user_id"])

    # Replays table
    op.create_table(
        "replays",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("player_name", sa.String(255), nullable=False),
        sa.Column("champion", sa.String(100), nullable=False),
        sa.Column("rank_tier", sa.String(100), nullable=True),
        sa.Column("kda", sa.String(50), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("game_mode", sa.String(100), nullable=True),
        sa.Column("patch_version", sa.String(50), nullable=True),
        sa.Column("download_url", sa.String(512), nullable=True),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        sa.Column("status", sa.String(50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_replays_user_id", "replays", ["user_id"])
    op.create_index("ix_replays_created_at", "replays", ["created_at"])

    # Upload jobs table
    op.create_table(
        "upload_jobs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("replay_id", sa.Uuid(), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("player_name", sa.String(255), nullable=False),
        sa.Column("champion", sa.String(100), nullable=False),
        sa.Column("status", sa.String(50), nullable=True),
        sa.Column("progress", sa.Integer(), nullable=True),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("file_size", sa.BigInteger(), nullable=True),
        sa.Column("thumbnail_url", sa.String(512), nullable=True),
        sa.Column("estimated_time", sa.Integer(), nullable=True),
        sa.Column("youtube_url", sa.String(512), nullable=True),
        sa.Column("error_message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), onupdate=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["replay_id"], ["replays.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_upload_jobs_user_id", "upload_jobs", ["user_id"])
    op.create_index("ix_upload_jobs_replay_id", "upload_jobs", ["replay_id"])
    op.create_index("ix_upload_jobs_status", "upload_jobs", ["status"])
    op.create_index("ix_upload_jobs_created_at", "upload_jobs", ["created_at"])


def downgrade() -> None:
    op.drop_table("upload_jobs")
    op.drop_table("replays")
    op.drop_table("system_status")
