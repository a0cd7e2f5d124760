"""
Enumerations shared by the ORM models and the API schemas.

Member names equal their values, so the same strings are stored in the
database, accepted in request bodies and returned in responses.
"""

import enum


class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class RouteLevel(str, enum.Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"
    EXPERT = "EXPERT"


class RoutePace(str, enum.Enum):
    ROCA = "ROCA"
    CARACOL = "CARACOL"
    GUSANO = "GUSANO"
    MARIPOSA = "MARIPOSA"
    EXPERIMENTADO = "EXPERIMENTADO"
    LOCURA_TOTAL = "LOCURA_TOTAL"
    MIAUCORNIA = "MIAUCORNIA"


class RouteCallStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class MeetingPointType(str, enum.Enum):
    PRIMARY = "PRIMARY"
    SECONDARY = "SECONDARY"


class AttendanceStatus(str, enum.Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class PhotoContext(str, enum.Enum):
    ROUTE_GALLERY = "ROUTE_GALLERY"
    ROUTE_CALL_COVER = "ROUTE_CALL_COVER"
    ROUTE_CALL_GALLERY = "ROUTE_CALL_GALLERY"


class PhotoStatus(str, enum.Enum):
    """
    Post-moderation lifecycle.

        ACTIVE ──flag──▶ FLAGGED ──approve──▶ ACTIVE
          │                 │
          └────reject───────┴──▶ REJECTED
        any (except DELETED) ──delete──▶ DELETED
    """

    ACTIVE = "ACTIVE"
    FLAGGED = "FLAGGED"
    REJECTED = "REJECTED"
    DELETED = "DELETED"
