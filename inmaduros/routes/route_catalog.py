"""
Route catalog handlers.

    GET /api/routes          → all routes with aggregates
    GET /api/routes/{slug}   → one route with reviews and latest photos
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.database import get_db_session
from inmaduros.schemas.common import DataResponse, ErrorResponse, ListResponse
from inmaduros.schemas.route import RouteDetailResponse, RouteResponse
from inmaduros.services.route_service import route_service

router = APIRouter(prefix="/api/routes", tags=["Routes"])


@router.get(
    "",
    response_model=ListResponse[RouteResponse],
    summary="List catalog routes",
)
async def list_routes(db: AsyncSession = Depends(get_db_session)):
    routes = await route_service.list_routes(db)
    return ListResponse[RouteResponse](data=routes, count=len(routes))


@router.get(
    "/{slug}",
    response_model=DataResponse[RouteDetailResponse],
    responses={404: {"description": "Route not found", "model": ErrorResponse}},
    summary="Get a route by slug",
)
async def get_route(slug: str, db: AsyncSession = Depends(get_db_session)):
    route = await route_service.get_route_detail(db, slug)
    return DataResponse[RouteDetailResponse](data=route)
