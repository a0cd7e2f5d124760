"""Favorite model: a user bookmarking a catalog route."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inmaduros.database import Base
from inmaduros.models.mixins import UUIDPrimaryKeyMixin, utc_now

if TYPE_CHECKING:
    from inmaduros.models.route import Route


class Favorite(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "favorites"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    route_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("routes.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=func.now(),
    )

    route: Mapped["Route"] = relationship(lazy="selectin")

    __table_args__ = (
        UniqueConstraint("user_id", "route_id", name="uq_favorites_user_route"),
    )
