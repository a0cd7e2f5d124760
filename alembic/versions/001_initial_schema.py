"""Initial schema

Revision ID: 001
Revises: None
Create Date: 2025-01-20 00:00:00.000000+00:00

What:  Creates users, routes, route calls with their meeting points,
       attendances, reviews, favorites and photos.
How:   PostgreSQL enum types for every status/level column, UUID primary
       keys generated by the application.

Rollback: downgrade() drops every table and enum type (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_role = sa.Enum("USER", "ADMIN", name="user_role")
route_pace = sa.Enum(
    "ROCA", "CARACOL", "GUSANO", "MARIPOSA", "EXPERIMENTADO", "LOCURA_TOTAL", "MIAUCORNIA",
    name="route_pace",
)
route_call_status = sa.Enum("SCHEDULED", "ONGOING", "COMPLETED", "CANCELLED", name="route_call_status")
meeting_point_type = sa.Enum("PRIMARY", "SECONDARY", name="meeting_point_type")
attendance_status = sa.Enum("CONFIRMED", "CANCELLED", name="attendance_status")
photo_context = sa.Enum("ROUTE_GALLERY", "ROUTE_CALL_COVER", "ROUTE_CALL_GALLERY", name="photo_context")
photo_status = sa.Enum("ACTIVE", "FLAGGED", "REJECTED", "DELETED", name="photo_status")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("clerk_id", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("last_name", sa.String(255), nullable=True),
        sa.Column("image_url", sa.String(1024), nullable=True),
        sa.Column("role", user_role, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_clerk_id", "users", ["clerk_id"], unique=True)

    op.create_table(
        "routes",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False),
        sa.Column("image", sa.String(1024), nullable=False),
        sa.Column("approximate_distance", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("map_embed_url", sa.String(1024), nullable=False),
        sa.Column("levels", sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_routes_slug", "routes", ["slug"], unique=True)

    op.create_table(
        "route_calls",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("route_id", sa.Uuid(), sa.ForeignKey("routes.id", ondelete="SET NULL"), nullable=True),
        sa.Column("custom_route_name", sa.String(200), nullable=True),
        sa.Column("organizer_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image", sa.String(1024), nullable=True),
        sa.Column("date_route", sa.DateTime(timezone=True), nullable=False),
        sa.Column("pace", route_pace, nullable=False),
        sa.Column("status", route_call_status, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_route_calls_route_id", "route_calls", ["route_id"])
    op.create_index("ix_route_calls_organizer_id", "route_calls", ["organizer_id"])
    op.create_index("idx_route_calls_date_route", "route_calls", ["date_route"])
    op.create_index("idx_route_calls_status", "route_calls", ["status"])

    op.create_table(
        "meeting_points",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("route_call_id", sa.Uuid(), sa.ForeignKey("route_calls.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", meeting_point_type, nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("custom_name", sa.String(200), nullable=True),
        sa.Column("location", sa.String(1024), nullable=True),
        sa.Column("time", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_meeting_points_route_call_id", "meeting_points", ["route_call_id"])

    op.create_table(
        "attendances",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("route_call_id", sa.Uuid(), sa.ForeignKey("route_calls.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", attendance_status, nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("route_call_id", "user_id", name="uq_attendances_route_call_user"),
    )
    op.create_index("ix_attendances_route_call_id", "attendances", ["route_call_id"])
    op.create_index("ix_attendances_user_id", "attendances", ["user_id"])

    op.create_table(
        "reviews",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("route_id", sa.Uuid(), sa.ForeignKey("routes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "route_id", name="uq_reviews_user_route"),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )
    op.create_index("ix_reviews_route_id", "reviews", ["route_id"])

    op.create_table(
        "favorites",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("route_id", sa.Uuid(), sa.ForeignKey("routes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "route_id", name="uq_favorites_user_route"),
    )
    op.create_index("ix_favorites_user_id", "favorites", ["user_id"])

    op.create_table(
        "photos",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("context", photo_context, nullable=False),
        sa.Column("route_id", sa.Uuid(), sa.ForeignKey("routes.id", ondelete="CASCADE"), nullable=True),
        sa.Column("route_call_id", sa.Uuid(), sa.ForeignKey("route_calls.id", ondelete="CASCADE"), nullable=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("image_url", sa.String(1024), nullable=False),
        sa.Column("caption", sa.String(500), nullable=True),
        sa.Column("status", photo_status, nullable=False),
        sa.Column("moderated_by", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("moderated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("moderation_notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_photos_user_id", "photos", ["user_id"])
    # Gallery queries filter by owner + context + status
    op.create_index("idx_photos_route_context_status", "photos", ["route_id", "context", "status"])
    op.create_index("idx_photos_route_call_context_status", "photos", ["route_call_id", "context", "status"])
    op.create_index("idx_photos_created_at", "photos", ["created_at"])


def downgrade() -> None:
    """Drop everything, children first. All data is lost."""
    op.drop_table("photos")
    op.drop_table("favorites")
    op.drop_table("reviews")
    op.drop_table("attendances")
    op.drop_table("meeting_points")
    op.drop_table("route_calls")
    op.drop_table("routes")
    op.drop_table("users")

    bind = op.get_bind()
    for enum_type in (
        photo_status,
        photo_context,
        attendance_status,
        meeting_point_type,
        route_call_status,
        route_pace,
        user_role,
    ):
        enum_type.drop(bind, checkfirst=True)
