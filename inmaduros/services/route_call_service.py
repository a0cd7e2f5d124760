"""
Los Inmaduros Backend — Route Call Service
===========================================

What:  Create, list, read, update, cancel and delete route calls.
Why:   Route calls are the heart of the club: everything else (attendance,
       cover photo, gallery) hangs off one.
How:   Input rules are already enforced by the request schemas; this layer
       adds the rules that need the database (route exists, ownership,
       status transitions, no deletion once people signed up).

Ownership Rules:
    update  → organizer only
    cancel  → organizer or ADMIN
    delete  → organizer or ADMIN, and only without attendances

Status Transitions handled here:
    SCHEDULED | ONGOING → CANCELLED   (cancel)
    COMPLETED → x  "Cannot cancel a completed route call"
    CANCELLED → x  "Route call is already cancelled"
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import and_, asc, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.constants import DEFAULT_ROUTE_CALL_IMAGE
from inmaduros.exceptions import BadRequestError, ForbiddenError, NotFoundError
from inmaduros.models import (
    Attendance,
    AttendanceStatus,
    MeetingPoint,
    RouteCall,
    RouteCallStatus,
    User,
)
from inmaduros.schemas.common import Pagination
from inmaduros.schemas.route_call import (
    AttendeeResponse,
    RouteCallCreate,
    RouteCallDetailResponse,
    RouteCallResponse,
    RouteCallUpdate,
)
from inmaduros.services.route_service import route_service

logger = logging.getLogger(__name__)

ACTIVE_STATUSES = (RouteCallStatus.SCHEDULED, RouteCallStatus.ONGOING)
FINISHED_STATUSES = (RouteCallStatus.COMPLETED, RouteCallStatus.CANCELLED)


class RouteCallService:
    """
    Business logic for route calls.

    Every mutating method re-reads the route call afterwards so the response
    carries fresh relationships and `attendanceCount`.
    """

    # ── Lookups ───────────────────────────────────────────────────────────

    async def _load(self, db: AsyncSession, route_call_id: uuid.UUID) -> Optional[RouteCall]:
        result = await db.execute(
            select(RouteCall)
            .where(RouteCall.id == route_call_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_route_call_or_404(self, db: AsyncSession, route_call_id: uuid.UUID) -> RouteCall:
        route_call = await self._load(db, route_call_id)
        if route_call is None:
            raise NotFoundError(
                message="Route call not found",
                resource="route_call",
                resource_id=str(route_call_id),
            )
        return route_call

    async def _confirmed_attendees(self, db: AsyncSession, route_call_id: uuid.UUID) -> List[Attendance]:
        result = await db.execute(
            select(Attendance)
            .where(
                Attendance.route_call_id == route_call_id,
                Attendance.status == AttendanceStatus.CONFIRMED,
            )
            .order_by(asc(Attendance.created_at))
        )
        return list(result.scalars().all())

    async def _detail(self, db: AsyncSession, route_call: RouteCall) -> RouteCallDetailResponse:
        attendees = await self._confirmed_attendees(db, route_call.id)
        base = RouteCallResponse.model_validate(route_call)
        return RouteCallDetailResponse(
            **base.model_dump(),
            attendances=[AttendeeResponse.model_validate(a) for a in attendees],
        )

    # ── Create ────────────────────────────────────────────────────────────

    async def create_route_call(
        self,
        db: AsyncSession,
        organizer: User,
        data: RouteCallCreate,
    ) -> RouteCallDetailResponse:
        """
        Schedule a new outing organized by the caller.

        Title and image come from the catalog route when `routeId` is given;
        custom outings use their own name and fall back to the default image.

        Raises:
            NotFoundError: `routeId` does not exist (→ 404 "Route not found")
        """
        if data.route_id is not None:
            route = await route_service.get_route_or_404(db, data.route_id)
            title = route.name
            image = data.image or route.image
        else:
            title = data.custom_route_name
            image = data.image or DEFAULT_ROUTE_CALL_IMAGE

        route_call = RouteCall(
            route_id=data.route_id,
            custom_route_name=data.custom_route_name,
            organizer_id=organizer.id,
            title=title,
            description=data.description,
            image=image,
            date_route=data.date_route,
            pace=data.pace,
            status=RouteCallStatus.SCHEDULED,
            meeting_points=[
                MeetingPoint(
                    type=point.type,
                    name=point.name,
                    custom_name=point.custom_name,
                    location=point.location,
                    time=point.time,
                )
                for point in data.meeting_points
            ],
        )
        db.add(route_call)
        await db.flush()
        logger.info("Route call %s created by %s (%s)", route_call.id, organizer.id, title)

        return await self._detail(db, await self.get_route_call_or_404(db, route_call.id))

    # ── Read ──────────────────────────────────────────────────────────────

    async def list_route_calls(
        self,
        db: AsyncSession,
        page: int,
        limit: int,
        status: Optional[RouteCallStatus] = None,
        organizer_id: Optional[uuid.UUID] = None,
        route_id: Optional[uuid.UUID] = None,
        upcoming: Optional[bool] = None,
    ) -> Tuple[List[RouteCallResponse], Pagination]:
        """
        Filtered, paginated list.

        `upcoming=True`  → future outings still on (SCHEDULED/ONGOING), soonest first
        `upcoming=False` → past or finished outings, most recent first
        """
        conditions = []
        if status is not None:
            conditions.append(RouteCall.status == status)
        if organizer_id is not None:
            conditions.append(RouteCall.organizer_id == organizer_id)
        if route_id is not None:
            conditions.append(RouteCall.route_id == route_id)

        now = datetime.now(timezone.utc)
        if upcoming is True:
            conditions.append(and_(RouteCall.date_route >= now, RouteCall.status.in_(ACTIVE_STATUSES)))
        elif upcoming is False:
            conditions.append(or_(RouteCall.date_route < now, RouteCall.status.in_(FINISHED_STATUSES)))

        order = desc(RouteCall.date_route) if upcoming is False else asc(RouteCall.date_route)

        total_count = (
            await db.execute(select(func.count(RouteCall.id)).where(*conditions))
        ).scalar() or 0
        result = await db.execute(
            select(RouteCall)
            .where(*conditions)
            .order_by(order)
            .offset(Pagination.offset(page, limit))
            .limit(limit)
        )

        items = [RouteCallResponse.model_validate(rc) for rc in result.scalars().all()]
        return items, Pagination.build(page, limit, total_count)

    async def get_route_call(self, db: AsyncSession, route_call_id: uuid.UUID) -> RouteCallDetailResponse:
        route_call = await self.get_route_call_or_404(db, route_call_id)
        return await self._detail(db, route_call)

    # ── Update / Cancel / Delete ──────────────────────────────────────────

    async def update_route_call(
        self,
        db: AsyncSession,
        user: User,
        route_call_id: uuid.UUID,
        data: RouteCallUpdate,
    ) -> RouteCallDetailResponse:
        route_call = await self.get_route_call_or_404(db, route_call_id)
        if route_call.organizer_id != user.id:
            raise ForbiddenError(message="Only the organizer can update this route call")

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            if value is None and field in ("title", "date_route", "pace"):
                # Required columns: explicit null means "leave as is"
                continue
            setattr(route_call, field, value)
        await db.flush()
        logger.info("Route call %s updated: %s", route_call_id, sorted(changes))

        return await self._detail(db, await self.get_route_call_or_404(db, route_call_id))

    async def cancel_route_call(
        self,
        db: AsyncSession,
        user: User,
        route_call_id: uuid.UUID,
    ) -> RouteCallDetailResponse:
        route_call = await self.get_route_call_or_404(db, route_call_id)
        if route_call.organizer_id != user.id and not user.is_admin:
            raise ForbiddenError(message="Only the organizer or an admin can cancel this route call")
        if route_call.status == RouteCallStatus.COMPLETED:
            raise BadRequestError(message="Cannot cancel a completed route call")
        if route_call.status == RouteCallStatus.CANCELLED:
            raise BadRequestError(message="Route call is already cancelled")

        route_call.status = RouteCallStatus.CANCELLED
        await db.flush()
        logger.info("Route call %s cancelled by %s", route_call_id, user.id)

        return await self._detail(db, await self.get_route_call_or_404(db, route_call_id))

    async def delete_route_call(self, db: AsyncSession, user: User, route_call_id: uuid.UUID) -> None:
        """
        Hard delete. Meeting points go with it; calls with any attendance
        history (confirmed or cancelled) must be cancelled instead.
        """
        route_call = await self.get_route_call_or_404(db, route_call_id)
        if route_call.organizer_id != user.id and not user.is_admin:
            raise ForbiddenError(message="Only the organizer or an admin can delete this route call")

        attendance_rows = (
            await db.execute(
                select(func.count(Attendance.id)).where(Attendance.route_call_id == route_call_id)
            )
        ).scalar() or 0
        if attendance_rows > 0:
            raise BadRequestError(message="Cannot delete a route call with attendances. Cancel it instead.")

        await db.delete(route_call)
        await db.flush()
        logger.info("Route call %s deleted by %s", route_call_id, user.id)


# ── Singleton Instance ────────────────────────────────────────────────────
route_call_service = RouteCallService()
