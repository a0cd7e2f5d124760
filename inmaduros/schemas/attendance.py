"""Attendance response schemas (the confirm/cancel endpoints take no body)."""

import uuid
from datetime import datetime

from inmaduros.models.enums import AttendanceStatus, RouteCallStatus, RoutePace
from inmaduros.schemas.common import CamelModel
from inmaduros.schemas.route_call import RouteCallResponse
from inmaduros.schemas.user import UserWithLastName


class AttendanceRouteCallSummary(CamelModel):
    id: uuid.UUID
    title: str
    date_route: datetime
    pace: RoutePace
    status: RouteCallStatus


class AttendanceResponse(CamelModel):
    id: uuid.UUID
    route_call_id: uuid.UUID
    user_id: uuid.UUID
    status: AttendanceStatus
    created_at: datetime
    updated_at: datetime
    route_call: AttendanceRouteCallSummary
    user: UserWithLastName


class MyAttendanceResponse(CamelModel):
    id: uuid.UUID
    status: AttendanceStatus
    created_at: datetime
    route_call: RouteCallResponse
