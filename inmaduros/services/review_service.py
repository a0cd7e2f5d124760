"""Reviews: one rating and optional comment per user and catalog route."""

import logging
import uuid
from typing import List, Tuple

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.exceptions import ConflictError, ForbiddenError, NotFoundError
from inmaduros.models import Review, User
from inmaduros.schemas.common import Pagination
from inmaduros.schemas.review import ReviewCreate, ReviewResponse, ReviewUpdate
from inmaduros.services.route_service import route_service

logger = logging.getLogger(__name__)


class ReviewService:

    async def _get_review_or_404(self, db: AsyncSession, review_id: uuid.UUID) -> Review:
        result = await db.execute(
            select(Review).where(Review.id == review_id).execution_options(populate_existing=True)
        )
        review = result.scalar_one_or_none()
        if review is None:
            raise NotFoundError(message="Review not found", resource="review", resource_id=str(review_id))
        return review

    async def list_route_reviews(
        self,
        db: AsyncSession,
        route_id: uuid.UUID,
        page: int,
        limit: int,
    ) -> Tuple[List[ReviewResponse], Pagination]:
        """Newest first."""
        total_count = (
            await db.execute(select(func.count(Review.id)).where(Review.route_id == route_id))
        ).scalar() or 0
        result = await db.execute(
            select(Review)
            .where(Review.route_id == route_id)
            .order_by(desc(Review.created_at))
            .offset(Pagination.offset(page, limit))
            .limit(limit)
        )
        items = [ReviewResponse.model_validate(r) for r in result.scalars().all()]
        return items, Pagination.build(page, limit, total_count)

    async def create_review(
        self,
        db: AsyncSession,
        user: User,
        route_id: uuid.UUID,
        data: ReviewCreate,
    ) -> ReviewResponse:
        """
        Raises:
            NotFoundError:  route does not exist
            ConflictError:  the caller already reviewed this route
        """
        await route_service.get_route_or_404(db, route_id)

        existing = await db.execute(
            select(Review.id).where(Review.route_id == route_id, Review.user_id == user.id)
        )
        if existing.scalar_one_or_none() is not None:
            raise ConflictError(message="You have already reviewed this route")

        review = Review(route_id=route_id, user_id=user.id, rating=data.rating, comment=data.comment)
        db.add(review)
        await db.flush()
        logger.info("Review %s created for route %s (rating=%d)", review.id, route_id, data.rating)

        return ReviewResponse.model_validate(await self._get_review_or_404(db, review.id))

    async def update_review(
        self,
        db: AsyncSession,
        user: User,
        review_id: uuid.UUID,
        data: ReviewUpdate,
    ) -> ReviewResponse:
        review = await self._get_review_or_404(db, review_id)
        if review.user_id != user.id:
            raise ForbiddenError(message="You don't have permission to edit this review")

        changes = data.model_dump(exclude_unset=True)
        if changes.get("rating") is not None:
            review.rating = changes["rating"]
        if "comment" in changes:
            review.comment = changes["comment"]
        await db.flush()

        return ReviewResponse.model_validate(await self._get_review_or_404(db, review_id))

    async def delete_review(self, db: AsyncSession, user: User, review_id: uuid.UUID) -> None:
        """Owner or ADMIN."""
        review = await self._get_review_or_404(db, review_id)
        if review.user_id != user.id and not user.is_admin:
            raise ForbiddenError(message="You don't have permission to delete this review")

        await db.delete(review)
        await db.flush()
        logger.info("Review %s deleted by %s", review_id, user.id)


# ── Singleton Instance ────────────────────────────────────────────────────
review_service = ReviewService()
