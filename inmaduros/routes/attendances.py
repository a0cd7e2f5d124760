"""
Attendance handlers.

    POST   /api/route-calls/{routeCallId}/attendances   confirm (auth)
    DELETE /api/route-calls/{routeCallId}/attendances   cancel (auth)
    GET    /api/route-calls/{routeCallId}/attendances   confirmed attendees
    GET    /api/attendances/my-attendances              caller's outings (auth)
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.auth import get_current_user
from inmaduros.database import get_db_session
from inmaduros.models import User
from inmaduros.schemas.attendance import AttendanceResponse, MyAttendanceResponse
from inmaduros.schemas.common import ErrorResponse, ListResponse, MessageResponse
from inmaduros.schemas.route_call import AttendeeResponse
from inmaduros.services.attendance_service import attendance_service

router = APIRouter(tags=["Attendances"])


@router.post(
    "/api/route-calls/{route_call_id}/attendances",
    status_code=201,
    response_model=MessageResponse[AttendanceResponse],
    responses={
        400: {"description": "Route call cancelled or completed", "model": ErrorResponse},
        404: {"description": "Route call not found", "model": ErrorResponse},
        409: {"description": "Already attending", "model": ErrorResponse},
    },
    summary="Confirm attendance",
)
async def confirm_attendance(
    route_call_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    attendance = await attendance_service.confirm_attendance(db, user, route_call_id)
    return MessageResponse[AttendanceResponse](
        message="Attendance confirmed successfully",
        data=attendance,
    )


@router.delete(
    "/api/route-calls/{route_call_id}/attendances",
    response_model=MessageResponse[AttendanceResponse],
    responses={
        400: {"description": "Already cancelled", "model": ErrorResponse},
        404: {"description": "Attendance not found", "model": ErrorResponse},
    },
    summary="Cancel attendance",
)
async def cancel_attendance(
    route_call_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    attendance = await attendance_service.cancel_attendance(db, user, route_call_id)
    return MessageResponse[AttendanceResponse](
        message="Attendance cancelled successfully",
        data=attendance,
    )


@router.get(
    "/api/route-calls/{route_call_id}/attendances",
    response_model=ListResponse[AttendeeResponse],
    responses={404: {"description": "Route call not found", "model": ErrorResponse}},
    summary="List confirmed attendees",
)
async def list_attendances(route_call_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
    attendees = await attendance_service.list_route_call_attendances(db, route_call_id)
    return ListResponse[AttendeeResponse](data=attendees, count=len(attendees))


@router.get(
    "/api/attendances/my-attendances",
    response_model=ListResponse[MyAttendanceResponse],
    summary="List the caller's confirmed attendances",
)
async def my_attendances(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    attendances = await attendance_service.list_my_attendances(db, user)
    return ListResponse[MyAttendanceResponse](data=attendances, count=len(attendances))
