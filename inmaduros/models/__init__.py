"""
ORM models package.

Importing this package registers every table on `Base.metadata` (Alembic and
the test suite rely on that) and attaches the aggregate column properties
that the API exposes as flat fields (`reviewCount`, `averageRating`, ...).
They are correlated scalar subqueries, loaded together with the parent row,
so no extra round trip or async lazy load is needed to serialize them.
"""

from sqlalchemy import Float, cast, func, select
from sqlalchemy.orm import column_property

from inmaduros.models.attendance import Attendance
from inmaduros.models.enums import (
    AttendanceStatus,
    MeetingPointType,
    PhotoContext,
    PhotoStatus,
    RouteCallStatus,
    RouteLevel,
    RoutePace,
    UserRole,
)
from inmaduros.models.favorite import Favorite
from inmaduros.models.photo import Photo
from inmaduros.models.review import Review
from inmaduros.models.route import Route
from inmaduros.models.route_call import MeetingPoint, RouteCall
from inmaduros.models.user import User

# ── Route aggregates ──────────────────────────────────────────────────────
Route.review_count = column_property(
    select(func.count(Review.id))
    .where(Review.route_id == Route.id)
    .correlate_except(Review)
    .scalar_subquery()
)
Route.favorite_count = column_property(
    select(func.count(Favorite.id))
    .where(Favorite.route_id == Route.id)
    .correlate_except(Favorite)
    .scalar_subquery()
)
Route.route_call_count = column_property(
    select(func.count(RouteCall.id))
    .where(RouteCall.route_id == Route.id)
    .correlate_except(RouteCall)
    .scalar_subquery()
)
Route.photo_count = column_property(
    select(func.count(Photo.id))
    .where(Photo.route_id == Route.id, Photo.status == PhotoStatus.ACTIVE)
    .correlate_except(Photo)
    .scalar_subquery()
)
Route.average_rating = column_property(
    select(func.coalesce(func.avg(cast(Review.rating, Float)), 0.0))
    .where(Review.route_id == Route.id)
    .correlate_except(Review)
    .scalar_subquery()
)

# ── Route call aggregates ─────────────────────────────────────────────────
RouteCall.attendance_count = column_property(
    select(func.count(Attendance.id))
    .where(
        Attendance.route_call_id == RouteCall.id,
        Attendance.status == AttendanceStatus.CONFIRMED,
    )
    .correlate_except(Attendance)
    .scalar_subquery()
)

__all__ = [
    "Attendance",
    "AttendanceStatus",
    "Favorite",
    "MeetingPoint",
    "MeetingPointType",
    "Photo",
    "PhotoContext",
    "PhotoStatus",
    "Review",
    "Route",
    "RouteCall",
    "RouteCallStatus",
    "RouteLevel",
    "RoutePace",
    "User",
    "UserRole",
]
