"""initial schema: users, categories, videos, posts, comments, likes, playlists

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("last_login", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
    )

    op.create_table(
        "videos",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("channel", sa.String(255), nullable=False),
        sa.Column("video_url", sa.String(512), nullable=False),
        sa.Column("avatar_url", sa.String(512), nullable=True),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("categories.id"), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_short", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("duration", sa.String(16), nullable=True),
    )
    op.create_index("ix_videos_category_id", "videos", ["category_id"])
    op.create_index("ix_videos_created_at", "videos", ["created_at"])

    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("image_url", sa.String(512), nullable=True),
        sa.Column("author_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    for parent, table in (("video", "videos"), ("post", "posts")):
        op.create_table(
            f"{parent}_comments",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column(f"{parent}_id", sa.Integer(), sa.ForeignKey(f"{table}.id"), nullable=False),
            sa.Column("content", sa.Text(), nullable=False),
            sa.Column("session_id", sa.String(64), nullable=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        )
        op.create_index(f"ix_{parent}_comments_{parent}_id", f"{parent}_comments", [f"{parent}_id"])

        op.create_table(
            f"{parent}_likes",
            sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
            sa.Column(f"{parent}_id", sa.Integer(), sa.ForeignKey(f"{table}.id"), nullable=False),
            sa.Column("session_id", sa.String(64), nullable=True),
            sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
            sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
            sa.UniqueConstraint(f"{parent}_id", "session_id", name=f"uq_{parent}_likes_{parent}_session"),
            sa.UniqueConstraint(f"{parent}_id", "user_id", name=f"uq_{parent}_likes_{parent}_user"),
        )
        op.create_index(f"ix_{parent}_likes_{parent}_id", f"{parent}_likes", [f"{parent}_id"])

    op.create_table(
        "playlists",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )

    op.create_table(
        "video_playlists",
        sa.Column("playlist_id", sa.Integer(), sa.ForeignKey("playlists.id"), primary_key=True),
        sa.Column("video_id", sa.Integer(), sa.ForeignKey("videos.id"), primary_key=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("added_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("video_playlists")
    op.drop_table("playlists")
    for parent in ("post", "video"):
        op.drop_table(f"{parent}_likes")
        op.drop_table(f"{parent}_comments")
    op.drop_table("posts")
    op.drop_index("ix_videos_created_at", table_name="videos")
    op.drop_index("ix_videos_category_id", table_name="videos")
    op.drop_table("videos")
    op.drop_table("categories")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
