"""
Favorite handlers.

    POST   /api/routes/{routeId}/favorites   add (auth)
    DELETE /api/routes/{routeId}/favorites   remove (auth)
    GET    /api/favorites                    caller's favorites (auth)
    GET    /api/favorites/check/{routeId}    {"isFavorite": bool} (auth)
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.auth import get_current_user
from inmaduros.database import get_db_session
from inmaduros.models import User
from inmaduros.schemas.common import (
    DataResponse,
    ErrorResponse,
    ListResponse,
    MessageResponse,
    SuccessResponse,
)
from inmaduros.schemas.favorite import FavoriteCheckResponse, FavoriteResponse
from inmaduros.services.favorite_service import favorite_service

router = APIRouter(tags=["Favorites"])


@router.post(
    "/api/routes/{route_id}/favorites",
    status_code=201,
    response_model=MessageResponse[FavoriteResponse],
    responses={
        404: {"description": "Route not found", "model": ErrorResponse},
        409: {"description": "Already a favorite", "model": ErrorResponse},
    },
    summary="Add a route to favorites",
)
async def add_favorite(
    route_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    favorite = await favorite_service.add_favorite(db, user, route_id)
    return MessageResponse[FavoriteResponse](
        message="Route added to favorites successfully",
        data=favorite,
    )


@router.delete(
    "/api/routes/{route_id}/favorites",
    response_model=SuccessResponse,
    responses={404: {"description": "Favorite not found", "model": ErrorResponse}},
    summary="Remove a route from favorites",
)
async def remove_favorite(
    route_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await favorite_service.remove_favorite(db, user, route_id)
    return SuccessResponse(message="Route removed from favorites successfully")


@router.get(
    "/api/favorites",
    response_model=ListResponse[FavoriteResponse],
    summary="List the caller's favorite routes",
)
async def list_favorites(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    favorites = await favorite_service.list_favorites(db, user)
    return ListResponse[FavoriteResponse](data=favorites, count=len(favorites))


@router.get(
    "/api/favorites/check/{route_id}",
    response_model=DataResponse[FavoriteCheckResponse],
    summary="Check whether a route is a favorite",
)
async def check_favorite(
    route_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    is_favorite = await favorite_service.is_favorite(db, user, route_id)
    return DataResponse[FavoriteCheckResponse](data=FavoriteCheckResponse(is_favorite=is_favorite))
