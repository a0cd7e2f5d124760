"""
Review handlers.

    GET    /api/routes/{routeId}/reviews   paginated, newest first
    POST   /api/routes/{routeId}/reviews   create (auth, one per route)
    PUT    /api/reviews/{reviewId}         update (owner)
    DELETE /api/reviews/{reviewId}         delete (owner or admin)
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.auth import get_current_user
from inmaduros.database import get_db_session
from inmaduros.models import User
from inmaduros.schemas.common import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    ErrorResponse,
    MessageResponse,
    PaginatedResponse,
    SuccessResponse,
)
from inmaduros.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from inmaduros.services.review_service import review_service

router = APIRouter(tags=["Reviews"])


@router.get(
    "/api/routes/{route_id}/reviews",
    response_model=PaginatedResponse[ReviewResponse],
    summary="List reviews of a route",
)
async def list_reviews(
    route_id: uuid.UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db_session),
):
    items, pagination = await review_service.list_route_reviews(db, route_id, page, limit)
    return PaginatedResponse[ReviewResponse](data=items, pagination=pagination)


@router.post(
    "/api/routes/{route_id}/reviews",
    status_code=201,
    response_model=MessageResponse[ReviewResponse],
    responses={
        404: {"description": "Route not found", "model": ErrorResponse},
        409: {"description": "Already reviewed", "model": ErrorResponse},
    },
    summary="Review a route",
)
async def create_review(
    route_id: uuid.UUID,
    data: ReviewCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    review = await review_service.create_review(db, user, route_id, data)
    return MessageResponse[ReviewResponse](message="Review created successfully", data=review)


@router.put(
    "/api/reviews/{review_id}",
    response_model=MessageResponse[ReviewResponse],
    responses={
        403: {"description": "Not the author", "model": ErrorResponse},
        404: {"description": "Review not found", "model": ErrorResponse},
    },
    summary="Update own review",
)
async def update_review(
    review_id: uuid.UUID,
    data: ReviewUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    review = await review_service.update_review(db, user, review_id, data)
    return MessageResponse[ReviewResponse](message="Review updated successfully", data=review)


@router.delete(
    "/api/reviews/{review_id}",
    response_model=SuccessResponse,
    responses={
        403: {"description": "Not the author or an admin", "model": ErrorResponse},
        404: {"description": "Review not found", "model": ErrorResponse},
    },
    summary="Delete a review",
)
async def delete_review(
    review_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await review_service.delete_review(db, user, review_id)
    return SuccessResponse(message="Review deleted successfully")
