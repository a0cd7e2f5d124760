"""
Los Inmaduros Backend — Route Call & Meeting Point Models
==========================================================

What:  A route call is a scheduled group outing; meeting points are where
       the group gathers before it starts.
Why:   Central entity of the app: attendance, cover photo and gallery are
       all scoped to a route call.
How:   A route call points at a catalog route OR carries a custom route name
       (the API guarantees exactly one of them). It owns one PRIMARY and at
       most one SECONDARY meeting point.

Lifecycle:
    SCHEDULED → ONGOING → COMPLETED
        └──────────┴──────→ CANCELLED  (organizer or admin)

Query Patterns:
    - Upcoming outings: WHERE date_route >= now AND status IN (...)
      ORDER BY date_route → idx_route_calls_date_route
    - Organizer dashboard: WHERE organizer_id = :id → FK index
"""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inmaduros.database import Base
from inmaduros.models.enums import MeetingPointType, RouteCallStatus, RoutePace
from inmaduros.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from inmaduros.models.route import Route
    from inmaduros.models.user import User


class RouteCall(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "route_calls"

    # ── Route reference ───────────────────────────────────────────────────
    # NULL for ad-hoc outings; SET NULL keeps historic calls if a catalog
    # route is ever removed
    route_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("routes.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    custom_route_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    organizer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ── Display fields ────────────────────────────────────────────────────
    # Copied from the catalog route at creation time (or the custom name)
    # so the organizer can retitle the outing without touching the route
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

    # ── Schedule ──────────────────────────────────────────────────────────
    date_route: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    pace: Mapped[RoutePace] = mapped_column(SAEnum(RoutePace, name="route_pace"), nullable=False)
    status: Mapped[RouteCallStatus] = mapped_column(
        SAEnum(RouteCallStatus, name="route_call_status"),
        nullable=False,
        default=RouteCallStatus.SCHEDULED,
    )

    # ── Relationships ─────────────────────────────────────────────────────
    # selectin: every response that shows a route call also shows these,
    # and async sessions cannot lazy-load on attribute access
    route: Mapped[Optional["Route"]] = relationship(lazy="selectin")
    organizer: Mapped["User"] = relationship(lazy="selectin")
    meeting_points: Mapped[List["MeetingPoint"]] = relationship(
        back_populates="route_call",
        cascade="all, delete-orphan",
        order_by="MeetingPoint.type",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_route_calls_date_route", "date_route"),
        Index("idx_route_calls_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<RouteCall(id={self.id}, title='{self.title}', "
            f"status='{self.status}', date_route='{self.date_route}')>"
        )


class MeetingPoint(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "meeting_points"

    route_call_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("route_calls.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[MeetingPointType] = mapped_column(
        SAEnum(MeetingPointType, name="meeting_point_type"),
        nullable=False,
    )

    # One of the predefined names (see inmaduros.constants) or "Otro",
    # in which case custom_name carries the free text
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    custom_name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    # Google Maps link
    location: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    time: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    route_call: Mapped["RouteCall"] = relationship(back_populates="meeting_points")
