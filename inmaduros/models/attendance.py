"""
Attendance model: a user's confirmed/cancelled participation in a route call.

A single row per (route_call, user). Cancelling flips the status instead of
deleting the row, so confirming again reactivates the same record.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inmaduros.database import Base
from inmaduros.models.enums import AttendanceStatus
from inmaduros.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from inmaduros.models.route_call import RouteCall
    from inmaduros.models.user import User


class Attendance(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "attendances"

    route_call_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("route_calls.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[AttendanceStatus] = mapped_column(
        SAEnum(AttendanceStatus, name="attendance_status"),
        nullable=False,
        default=AttendanceStatus.CONFIRMED,
    )

    route_call: Mapped["RouteCall"] = relationship(lazy="selectin")
    user: Mapped["User"] = relationship(lazy="selectin")

    __table_args__ = (
        UniqueConstraint("route_call_id", "user_id", name="uq_attendances_route_call_user"),
    )
