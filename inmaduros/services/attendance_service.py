"""
Los Inmaduros Backend — Attendance Service
===========================================

What:  Confirm/cancel a user's participation in a route call.
Why:   Attendance drives `attendanceCount`, the attendee list and who may
       post to a route call gallery.
How:   One row per (route call, user), guarded by a unique constraint.
       Cancelling flips the status instead of deleting, so confirming again
       reactivates the same row (idempotent re-attendance).

Row Lifecycle:
    (none) ──confirm──▶ CONFIRMED ──cancel──▶ CANCELLED
                            ▲                     │
                            └──────confirm────────┘
"""

import logging
import uuid
from typing import List

from sqlalchemy import asc, select
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.exceptions import BadRequestError, ConflictError, NotFoundError
from inmaduros.models import Attendance, AttendanceStatus, RouteCall, RouteCallStatus, User
from inmaduros.schemas.attendance import AttendanceResponse, MyAttendanceResponse
from inmaduros.schemas.route_call import AttendeeResponse
from inmaduros.services.route_call_service import route_call_service

logger = logging.getLogger(__name__)


class AttendanceService:

    async def _find(self, db: AsyncSession, route_call_id: uuid.UUID, user_id: uuid.UUID):
        result = await db.execute(
            select(Attendance)
            .where(Attendance.route_call_id == route_call_id, Attendance.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def is_confirmed_attendee(self, db: AsyncSession, route_call_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        attendance = await self._find(db, route_call_id, user_id)
        return attendance is not None and attendance.status == AttendanceStatus.CONFIRMED

    async def confirm_attendance(
        self,
        db: AsyncSession,
        user: User,
        route_call_id: uuid.UUID,
    ) -> AttendanceResponse:
        """
        Sign the caller up for a route call.

        Raises:
            NotFoundError:    route call does not exist
            BadRequestError:  route call cancelled or completed
            ConflictError:    already CONFIRMED
        """
        route_call = await route_call_service.get_route_call_or_404(db, route_call_id)
        if route_call.status == RouteCallStatus.CANCELLED:
            raise BadRequestError(message="Cannot attend a cancelled route call")
        if route_call.status == RouteCallStatus.COMPLETED:
            raise BadRequestError(message="Cannot attend a completed route call")

        attendance = await self._find(db, route_call_id, user.id)
        if attendance is not None and attendance.status == AttendanceStatus.CONFIRMED:
            raise ConflictError(message="You are already attending this route call")

        if attendance is not None:
            attendance.status = AttendanceStatus.CONFIRMED
            logger.info("Attendance %s reactivated for route call %s", attendance.id, route_call_id)
        else:
            attendance = Attendance(
                route_call_id=route_call_id,
                user_id=user.id,
                status=AttendanceStatus.CONFIRMED,
            )
            db.add(attendance)
            logger.info("User %s confirmed attendance to route call %s", user.id, route_call_id)
        await db.flush()

        return AttendanceResponse.model_validate(await self._find(db, route_call_id, user.id))

    async def cancel_attendance(
        self,
        db: AsyncSession,
        user: User,
        route_call_id: uuid.UUID,
    ) -> AttendanceResponse:
        attendance = await self._find(db, route_call_id, user.id)
        if attendance is None:
            raise NotFoundError(message="Attendance not found", resource="attendance")
        if attendance.status == AttendanceStatus.CANCELLED:
            raise BadRequestError(message="Attendance is already cancelled")

        attendance.status = AttendanceStatus.CANCELLED
        await db.flush()
        logger.info("User %s cancelled attendance to route call %s", user.id, route_call_id)

        return AttendanceResponse.model_validate(await self._find(db, route_call_id, user.id))

    async def list_route_call_attendances(
        self,
        db: AsyncSession,
        route_call_id: uuid.UUID,
    ) -> List[AttendeeResponse]:
        """Confirmed attendees, in sign-up order."""
        await route_call_service.get_route_call_or_404(db, route_call_id)
        result = await db.execute(
            select(Attendance)
            .where(
                Attendance.route_call_id == route_call_id,
                Attendance.status == AttendanceStatus.CONFIRMED,
            )
            .order_by(asc(Attendance.created_at))
        )
        return [AttendeeResponse.model_validate(a) for a in result.scalars().all()]

    async def list_my_attendances(self, db: AsyncSession, user: User) -> List[MyAttendanceResponse]:
        """The caller's confirmed outings, soonest first."""
        result = await db.execute(
            select(Attendance)
            .join(RouteCall, Attendance.route_call_id == RouteCall.id)
            .where(
                Attendance.user_id == user.id,
                Attendance.status == AttendanceStatus.CONFIRMED,
            )
            .order_by(asc(RouteCall.date_route))
        )
        return [MyAttendanceResponse.model_validate(a) for a in result.scalars().all()]


# ── Singleton Instance ────────────────────────────────────────────────────
attendance_service = AttendanceService()
