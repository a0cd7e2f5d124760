"""
Los Inmaduros Backend — Route Catalog Service
==============================================

What:  Read access to the seeded catalog of skating routes.
Why:   The catalog is static (managed by the seed script), so this service
       only lists and resolves routes for the other modules.
How:   Aggregates (reviews, favorites, route calls, photos, rating) are
       column properties on Route, loaded in the same SELECT.
"""

import logging
import uuid
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.exceptions import NotFoundError
from inmaduros.models import Photo, PhotoStatus, Review, Route
from inmaduros.schemas.photo import PhotoResponse
from inmaduros.schemas.review import ReviewResponse
from inmaduros.schemas.route import RouteDetailResponse, RouteResponse

logger = logging.getLogger(__name__)

ROUTE_DETAIL_PHOTO_LIMIT = 20


class RouteService:

    async def get_route_or_404(self, db: AsyncSession, route_id: uuid.UUID) -> Route:
        result = await db.execute(select(Route).where(Route.id == route_id))
        route = result.scalar_one_or_none()
        if route is None:
            raise NotFoundError(message="Route not found", resource="route", resource_id=str(route_id))
        return route

    async def get_route_by_slug_or_404(self, db: AsyncSession, slug: str) -> Route:
        result = await db.execute(select(Route).where(Route.slug == slug))
        route = result.scalar_one_or_none()
        if route is None:
            raise NotFoundError(message="Route not found", resource="route", resource_id=slug)
        return route

    async def list_routes(self, db: AsyncSession) -> List[RouteResponse]:
        """All catalog routes, alphabetical, with their aggregates."""
        result = await db.execute(select(Route).order_by(Route.name))
        return [RouteResponse.model_validate(route) for route in result.scalars().all()]

    async def get_route_detail(self, db: AsyncSession, slug: str) -> RouteDetailResponse:
        """
        One route with its reviews (newest first) and latest active photos.

        Raises:
            NotFoundError: unknown slug (→ 404 "Route not found")
        """
        route = await self.get_route_by_slug_or_404(db, slug)

        reviews = await db.execute(
            select(Review).where(Review.route_id == route.id).order_by(desc(Review.created_at))
        )
        photos = await db.execute(
            select(Photo)
            .where(Photo.route_id == route.id, Photo.status == PhotoStatus.ACTIVE)
            .order_by(desc(Photo.created_at))
            .limit(ROUTE_DETAIL_PHOTO_LIMIT)
        )

        base = RouteResponse.model_validate(route)
        return RouteDetailResponse(
            **base.model_dump(),
            reviews=[ReviewResponse.model_validate(r) for r in reviews.scalars().all()],
            photos=[PhotoResponse.model_validate(p) for p in photos.scalars().all()],
        )


# ── Singleton Instance ────────────────────────────────────────────────────
route_service = RouteService()
