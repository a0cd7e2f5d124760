"""
Los Inmaduros Backend — Route Call Handlers
============================================

What:  CRUD and lifecycle endpoints for route calls (group outings).
How:   Thin handlers: parse the request, resolve the caller, delegate to
       RouteCallService and wrap the result in the response envelope.

Endpoints:
    POST   /api/route-calls               create (auth)
    GET    /api/route-calls               list, filtered and paginated
    GET    /api/route-calls/{id}          detail with confirmed attendees
    PUT    /api/route-calls/{id}          update (organizer)
    PATCH  /api/route-calls/{id}/cancel   cancel (organizer or admin)
    DELETE /api/route-calls/{id}          delete (organizer or admin)
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.auth import get_current_user
from inmaduros.database import get_db_session
from inmaduros.models import RouteCallStatus, User
from inmaduros.schemas.common import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    DataResponse,
    ErrorResponse,
    MessageResponse,
    PaginatedResponse,
    SuccessResponse,
)
from inmaduros.schemas.route_call import (
    RouteCallCreate,
    RouteCallDetailResponse,
    RouteCallResponse,
    RouteCallUpdate,
)
from inmaduros.services.route_call_service import route_call_service

router = APIRouter(prefix="/api/route-calls", tags=["Route Calls"])

_errors = {
    400: {"description": "Validation failed or invalid state", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not allowed", "model": ErrorResponse},
    404: {"description": "Route call not found", "model": ErrorResponse},
}


@router.post(
    "",
    status_code=201,
    response_model=MessageResponse[RouteCallDetailResponse],
    responses=_errors,
    summary="Create a route call",
)
async def create_route_call(
    data: RouteCallCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    route_call = await route_call_service.create_route_call(db, user, data)
    return MessageResponse[RouteCallDetailResponse](
        message="Route call created successfully",
        data=route_call,
    )


@router.get(
    "",
    response_model=PaginatedResponse[RouteCallResponse],
    summary="List route calls",
)
async def list_route_calls(
    status: Optional[RouteCallStatus] = Query(None),
    organizer_id: Optional[uuid.UUID] = Query(None, alias="organizerId"),
    route_id: Optional[uuid.UUID] = Query(None, alias="routeId"),
    upcoming: Optional[bool] = Query(None, description="true: future and active; false: past or finished"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db_session),
):
    items, pagination = await route_call_service.list_route_calls(
        db,
        page=page,
        limit=limit,
        status=status,
        organizer_id=organizer_id,
        route_id=route_id,
        upcoming=upcoming,
    )
    return PaginatedResponse[RouteCallResponse](data=items, pagination=pagination)


@router.get(
    "/{route_call_id}",
    response_model=DataResponse[RouteCallDetailResponse],
    responses={404: _errors[404]},
    summary="Get a route call",
)
async def get_route_call(route_call_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
    route_call = await route_call_service.get_route_call(db, route_call_id)
    return DataResponse[RouteCallDetailResponse](data=route_call)


@router.put(
    "/{route_call_id}",
    response_model=MessageResponse[RouteCallDetailResponse],
    responses=_errors,
    summary="Update a route call (organizer only)",
)
async def update_route_call(
    route_call_id: uuid.UUID,
    data: RouteCallUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    route_call = await route_call_service.update_route_call(db, user, route_call_id, data)
    return MessageResponse[RouteCallDetailResponse](
        message="Route call updated successfully",
        data=route_call,
    )


@router.patch(
    "/{route_call_id}/cancel",
    response_model=MessageResponse[RouteCallDetailResponse],
    responses=_errors,
    summary="Cancel a route call (organizer or admin)",
)
async def cancel_route_call(
    route_call_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    route_call = await route_call_service.cancel_route_call(db, user, route_call_id)
    return MessageResponse[RouteCallDetailResponse](
        message="Route call cancelled successfully",
        data=route_call,
    )


@router.delete(
    "/{route_call_id}",
    response_model=SuccessResponse,
    responses=_errors,
    summary="Delete a route call without attendances (organizer or admin)",
)
async def delete_route_call(
    route_call_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await route_call_service.delete_route_call(db, user, route_call_id)
    return SuccessResponse(message="Route call deleted successfully")
