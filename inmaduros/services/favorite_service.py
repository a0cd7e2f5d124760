"""Favorites: a user's bookmarked catalog routes."""

import logging
import uuid
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.exceptions import ConflictError, NotFoundError
from inmaduros.models import Favorite, User
from inmaduros.schemas.favorite import FavoriteResponse
from inmaduros.services.route_service import route_service

logger = logging.getLogger(__name__)


class FavoriteService:

    async def _find(self, db: AsyncSession, user_id: uuid.UUID, route_id: uuid.UUID):
        result = await db.execute(
            select(Favorite)
            .where(Favorite.user_id == user_id, Favorite.route_id == route_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def add_favorite(self, db: AsyncSession, user: User, route_id: uuid.UUID) -> FavoriteResponse:
        await route_service.get_route_or_404(db, route_id)
        if await self._find(db, user.id, route_id) is not None:
            raise ConflictError(message="Route is already in your favorites")

        db.add(Favorite(user_id=user.id, route_id=route_id))
        await db.flush()
        logger.info("User %s favorited route %s", user.id, route_id)

        return FavoriteResponse.model_validate(await self._find(db, user.id, route_id))

    async def remove_favorite(self, db: AsyncSession, user: User, route_id: uuid.UUID) -> None:
        favorite = await self._find(db, user.id, route_id)
        if favorite is None:
            raise NotFoundError(message="Favorite not found", resource="favorite", resource_id=str(route_id))

        await db.delete(favorite)
        await db.flush()
        logger.info("User %s removed route %s from favorites", user.id, route_id)

    async def list_favorites(self, db: AsyncSession, user: User) -> List[FavoriteResponse]:
        """Newest first."""
        result = await db.execute(
            select(Favorite).where(Favorite.user_id == user.id).order_by(desc(Favorite.created_at))
        )
        return [FavoriteResponse.model_validate(f) for f in result.scalars().all()]

    async def is_favorite(self, db: AsyncSession, user: User, route_id: uuid.UUID) -> bool:
        return await self._find(db, user.id, route_id) is not None


# ── Singleton Instance ────────────────────────────────────────────────────
favorite_service = FavoriteService()
