"""
Los Inmaduros Backend — Route Call Schemas
===========================================

What:  Request validation and response shapes for route calls and their
       meeting points.
Why:   Most business rules of a route call are input rules, so they are
       enforced here before any database work happens:
           - exactly one of routeId / customRouteName
           - dateRoute strictly in the future
           - 1-2 meeting points: exactly one PRIMARY, at most one SECONDARY
           - meeting point locations must be Google Maps links
How:   pydantic field/model validators; failures become 400 responses with
       per-field details (see main.register_exception_handlers).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from inmaduros.models.enums import (
    AttendanceStatus,
    MeetingPointType,
    RouteCallStatus,
    RoutePace,
)
from inmaduros.schemas.common import CamelModel
from inmaduros.schemas.route import RouteSummary
from inmaduros.schemas.user import UserWithLastName
from inmaduros.schemas.validators import (
    ensure_future,
    ensure_url,
    is_google_maps_url,
    to_utc,
)


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class MeetingPointInput(CamelModel):
    type: MeetingPointType
    name: str = Field(min_length=1, max_length=200)
    custom_name: Optional[str] = Field(default=None, max_length=200)
    location: Optional[str] = Field(default=None, max_length=1024)
    time: Optional[datetime] = None

    @field_validator("location")
    @classmethod
    def validate_location(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        ensure_url(v)
        if not is_google_maps_url(v):
            raise ValueError("Location must be a Google Maps link")
        return v

    @field_validator("time")
    @classmethod
    def normalize_time(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc(v) if v is not None else v


class RouteCallCreate(CamelModel):
    """
    Body of POST /api/route-calls.

    Example:
        {
            "routeId": "7d0c...",
            "dateRoute": "2026-11-07T19:30:00Z",
            "pace": "GUSANO",
            "meetingPoints": [
                {"type": "PRIMARY", "name": "Explanada",
                 "location": "https://maps.app.goo.gl/gCJfpLSoy3D454Y19"}
            ]
        }
    """
    route_id: Optional[uuid.UUID] = None
    custom_route_name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    image: Optional[str] = Field(default=None, max_length=1024)
    date_route: datetime
    pace: RoutePace
    meeting_points: List[MeetingPointInput] = Field(min_length=1, max_length=2)

    @field_validator("image")
    @classmethod
    def validate_image(cls, v: Optional[str]) -> Optional[str]:
        return ensure_url(v)

    @field_validator("date_route")
    @classmethod
    def validate_date_route(cls, v: datetime) -> datetime:
        return ensure_future(v)

    @field_validator("meeting_points")
    @classmethod
    def validate_meeting_points(cls, v: List[MeetingPointInput]) -> List[MeetingPointInput]:
        primary = sum(1 for p in v if p.type == MeetingPointType.PRIMARY)
        secondary = sum(1 for p in v if p.type == MeetingPointType.SECONDARY)
        if primary == 0:
            raise ValueError("At least one PRIMARY meeting point is required")
        if primary > 1:
            raise ValueError("Only one PRIMARY meeting point is allowed")
        if secondary > 1:
            raise ValueError("Only one SECONDARY meeting point is allowed")
        return v

    @model_validator(mode="after")
    def check_route_source(self) -> "RouteCallCreate":
        if self.route_id and self.custom_route_name:
            raise ValueError("Cannot provide both routeId and customRouteName")
        if not self.route_id and not self.custom_route_name:
            raise ValueError("Either routeId or customRouteName must be provided")
        return self


class RouteCallUpdate(CamelModel):
    """Body of PUT /api/route-calls/{id}. Meeting points are not editable."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=1000)
    image: Optional[str] = Field(default=None, max_length=1024)
    date_route: Optional[datetime] = None
    pace: Optional[RoutePace] = None

    @field_validator("image")
    @classmethod
    def validate_image(cls, v: Optional[str]) -> Optional[str]:
        return ensure_url(v)

    @field_validator("date_route")
    @classmethod
    def validate_date_route(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_future(v) if v is not None else v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class MeetingPointResponse(CamelModel):
    id: uuid.UUID
    type: MeetingPointType
    name: str
    custom_name: Optional[str] = None
    location: Optional[str] = None
    time: Optional[datetime] = None


class RouteCallResponse(CamelModel):
    id: uuid.UUID
    route_id: Optional[uuid.UUID] = None
    custom_route_name: Optional[str] = None
    organizer_id: uuid.UUID
    title: str
    description: Optional[str] = None
    image: Optional[str] = None
    date_route: datetime
    pace: RoutePace
    status: RouteCallStatus
    created_at: datetime
    updated_at: datetime
    route: Optional[RouteSummary] = None
    organizer: UserWithLastName
    meeting_points: List[MeetingPointResponse] = []
    attendance_count: int = 0


class AttendeeResponse(CamelModel):
    id: uuid.UUID
    status: AttendanceStatus
    created_at: datetime
    user: UserWithLastName


class RouteCallDetailResponse(RouteCallResponse):
    attendances: List[AttendeeResponse] = []
