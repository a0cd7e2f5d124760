"""
Los Inmaduros Backend — Photo SQLAlchemy Model
===============================================

What:  An uploaded image in one of three galleries.
Why:   Photos are post-moderated: they are published (ACTIVE) immediately
       and an admin reviews them afterwards.
How:   `context` decides which parent is set:
           ROUTE_GALLERY      → route_id
           ROUTE_CALL_COVER   → route_call_id (one per route call)
           ROUTE_CALL_GALLERY → route_call_id
       Deleting a photo is a soft delete (status DELETED); the stored file
       is removed from storage at the same time.
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inmaduros.database import Base
from inmaduros.models.enums import PhotoContext, PhotoStatus
from inmaduros.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from inmaduros.models.route import Route
    from inmaduros.models.route_call import RouteCall
    from inmaduros.models.user import User


class Photo(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "photos"

    context: Mapped[PhotoContext] = mapped_column(
        SAEnum(PhotoContext, name="photo_context"),
        nullable=False,
    )
    route_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("routes.id", ondelete="CASCADE"),
        nullable=True,
    )
    route_call_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("route_calls.id", ondelete="CASCADE"),
        nullable=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Public URL: Supabase public object URL or /api/files/<path> locally
    image_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    caption: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    status: Mapped[PhotoStatus] = mapped_column(
        SAEnum(PhotoStatus, name="photo_status"),
        nullable=False,
        default=PhotoStatus.ACTIVE,
    )

    # ── Moderation ────────────────────────────────────────────────────────
    moderated_by: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    moderated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    moderation_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship(foreign_keys=[user_id], lazy="selectin")
    moderator: Mapped[Optional["User"]] = relationship(foreign_keys=[moderated_by], lazy="selectin")
    route: Mapped[Optional["Route"]] = relationship(lazy="selectin")
    route_call: Mapped[Optional["RouteCall"]] = relationship(lazy="selectin")

    __table_args__ = (
        Index("idx_photos_route_context_status", "route_id", "context", "status"),
        Index("idx_photos_route_call_context_status", "route_call_id", "context", "status"),
        Index("idx_photos_created_at", "created_at"),
    )
