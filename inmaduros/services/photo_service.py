"""
Los Inmaduros Backend — Photo Service (Post-Moderated Galleries)
=================================================================

What:  Upload, list, moderate and delete photos of the three galleries.
Why:   Photos publish immediately (ACTIVE) so outings get pictures while
       they are fresh; moderation happens afterwards.
How:   Context decides the parent and who may upload:
           ROUTE_GALLERY       → any authenticated user, route must exist
           ROUTE_CALL_COVER    → organizer of the route call only
           ROUTE_CALL_GALLERY  → CONFIRMED attendees only
       Bytes go through StorageService; the row only keeps the public URL.

Status Flow:
    upload ──▶ ACTIVE ──flag──▶ FLAGGED
                 ▲  │              │
        approve  │  └──reject──▶ REJECTED ◀──reject──┘
                 └── (from FLAGGED or REJECTED)
    owner/admin delete: any non-deleted status ──▶ DELETED (file removed)

"Pending review" = ACTIVE photos nobody moderated yet, plus FLAGGED ones.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import and_, asc, desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.exceptions import BadRequestError, ForbiddenError, NotFoundError
from inmaduros.models import Photo, PhotoContext, PhotoStatus, User
from inmaduros.schemas.common import Pagination
from inmaduros.schemas.photo import (
    GalleryRoute,
    PhotoResponse,
    PhotoRouteCallRef,
    PhotoUploadData,
    RouteCallGalleryResponse,
    RouteGalleryResponse,
)
from inmaduros.services.attendance_service import attendance_service
from inmaduros.services.route_call_service import route_call_service
from inmaduros.services.route_service import route_service
from inmaduros.services.storage_service import storage_service

logger = logging.getLogger(__name__)


class PhotoService:

    async def _load(self, db: AsyncSession, photo_id: uuid.UUID) -> Optional[Photo]:
        result = await db.execute(
            select(Photo).where(Photo.id == photo_id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _get_photo_or_404(self, db: AsyncSession, photo_id: uuid.UUID) -> Photo:
        photo = await self._load(db, photo_id)
        if photo is None:
            raise NotFoundError(message="Photo not found", resource="photo", resource_id=str(photo_id))
        return photo

    async def _response(self, db: AsyncSession, photo_id: uuid.UUID) -> PhotoResponse:
        return PhotoResponse.model_validate(await self._get_photo_or_404(db, photo_id))

    # ── Upload ────────────────────────────────────────────────────────────

    async def upload_photo(
        self,
        db: AsyncSession,
        user: User,
        data: PhotoUploadData,
        content: bytes,
        filename: str,
        content_type: str,
    ) -> PhotoResponse:
        """
        Validate the file, check the caller may post to the target gallery,
        store the file and create an ACTIVE photo.

        Raises:
            ValidationError:  file type / size / extension
            NotFoundError:    target route or route call missing
            ForbiddenError:   not organizer (cover) / not attendee (gallery)
        """
        # Reject bad files before touching the database
        storage_service.validate_image(filename, content_type, len(content))

        if data.context == PhotoContext.ROUTE_GALLERY:
            await route_service.get_route_or_404(db, data.route_id)
        else:
            route_call = await route_call_service.get_route_call_or_404(db, data.route_call_id)
            if data.context == PhotoContext.ROUTE_CALL_COVER and route_call.organizer_id != user.id:
                raise ForbiddenError(message="Only the organizer can upload a cover photo")
            if data.context == PhotoContext.ROUTE_CALL_GALLERY and not await attendance_service.is_confirmed_attendee(
                db, route_call.id, user.id
            ):
                raise ForbiddenError(
                    message="Only confirmed attendees can upload photos to this route call gallery"
                )

        image_url = await storage_service.upload_file(content, filename, content_type, data.context)

        photo = Photo(
            context=data.context,
            route_id=data.route_id,
            route_call_id=data.route_call_id,
            user_id=user.id,
            image_url=image_url,
            caption=data.caption or None,
            status=PhotoStatus.ACTIVE,
        )
        db.add(photo)
        try:
            await db.flush()
        except Exception:
            # No row points at the stored file; don't leave it orphaned
            await storage_service.delete_file(image_url)
            raise
        logger.info("Photo %s uploaded by %s (context=%s)", photo.id, user.id, data.context.value)

        return await self._response(db, photo.id)

    async def update_cover_photo(
        self,
        db: AsyncSession,
        user: User,
        route_call_id: uuid.UUID,
        content: bytes,
        filename: str,
        content_type: str,
    ) -> PhotoResponse:
        """
        Replace (or create) the cover of a route call. The previous file is
        removed from storage; the photo row is reused and goes back to an
        unmoderated ACTIVE state.
        """
        storage_service.validate_image(filename, content_type, len(content))

        route_call = await route_call_service.get_route_call_or_404(db, route_call_id)
        if route_call.organizer_id != user.id:
            raise ForbiddenError(message="Only the organizer can update the cover photo")

        image_url = await storage_service.upload_file(
            content, filename, content_type, PhotoContext.ROUTE_CALL_COVER
        )

        result = await db.execute(
            select(Photo)
            .where(Photo.route_call_id == route_call_id, Photo.context == PhotoContext.ROUTE_CALL_COVER)
            .order_by(asc(Photo.created_at))
            .limit(1)
        )
        cover = result.scalar_one_or_none()
        previous_url = None

        if cover is not None:
            previous_url = cover.image_url
            cover.image_url = image_url
            cover.status = PhotoStatus.ACTIVE
            cover.moderated_by = None
            cover.moderated_at = None
            cover.moderation_notes = None
            logger.info("Cover photo %s of route call %s replaced", cover.id, route_call_id)
        else:
            cover = Photo(
                context=PhotoContext.ROUTE_CALL_COVER,
                route_call_id=route_call_id,
                user_id=user.id,
                image_url=image_url,
                status=PhotoStatus.ACTIVE,
            )
            db.add(cover)
            logger.info("Cover photo created for route call %s", route_call_id)

        try:
            await db.flush()
        except Exception:
            # The row still points at the previous file, which stays in place
            await storage_service.delete_file(image_url)
            raise
        if previous_url is not None:
            await storage_service.delete_file(previous_url)

        return await self._response(db, cover.id)

    # ── Listing ───────────────────────────────────────────────────────────

    async def list_photos(
        self,
        db: AsyncSession,
        page: int,
        limit: int,
        context: Optional[PhotoContext] = None,
        route_id: Optional[uuid.UUID] = None,
        route_call_id: Optional[uuid.UUID] = None,
        status: PhotoStatus = PhotoStatus.ACTIVE,
    ) -> Tuple[List[PhotoResponse], Pagination]:
        conditions = [Photo.status == status]
        if context is not None:
            conditions.append(Photo.context == context)
        if route_id is not None:
            conditions.append(Photo.route_id == route_id)
        if route_call_id is not None:
            conditions.append(Photo.route_call_id == route_call_id)

        total_count = (
            await db.execute(select(func.count(Photo.id)).where(*conditions))
        ).scalar() or 0
        result = await db.execute(
            select(Photo)
            .where(*conditions)
            .order_by(desc(Photo.created_at))
            .offset(Pagination.offset(page, limit))
            .limit(limit)
        )
        items = [PhotoResponse.model_validate(p) for p in result.scalars().all()]
        return items, Pagination.build(page, limit, total_count)

    async def get_route_gallery(self, db: AsyncSession, slug: str) -> RouteGalleryResponse:
        route = await route_service.get_route_by_slug_or_404(db, slug)
        result = await db.execute(
            select(Photo)
            .where(
                Photo.route_id == route.id,
                Photo.context == PhotoContext.ROUTE_GALLERY,
                Photo.status == PhotoStatus.ACTIVE,
            )
            .order_by(desc(Photo.created_at))
        )
        photos = [PhotoResponse.model_validate(p) for p in result.scalars().all()]
        return RouteGalleryResponse(
            route=GalleryRoute.model_validate(route),
            photos=photos,
            count=len(photos),
        )

    async def get_route_call_gallery(self, db: AsyncSession, route_call_id: uuid.UUID) -> RouteCallGalleryResponse:
        route_call = await route_call_service.get_route_call_or_404(db, route_call_id)
        result = await db.execute(
            select(Photo)
            .where(
                Photo.route_call_id == route_call_id,
                Photo.context == PhotoContext.ROUTE_CALL_GALLERY,
                Photo.status == PhotoStatus.ACTIVE,
            )
            .order_by(desc(Photo.created_at))
        )
        photos = [PhotoResponse.model_validate(p) for p in result.scalars().all()]
        return RouteCallGalleryResponse(
            route_call=PhotoRouteCallRef.model_validate(route_call),
            photos=photos,
            count=len(photos),
        )

    async def list_user_photos(self, db: AsyncSession, user: User) -> List[PhotoResponse]:
        """Everything the caller uploaded except deleted photos, newest first."""
        result = await db.execute(
            select(Photo)
            .where(Photo.user_id == user.id, Photo.status != PhotoStatus.DELETED)
            .order_by(desc(Photo.created_at))
        )
        return [PhotoResponse.model_validate(p) for p in result.scalars().all()]

    async def list_pending_photos(self, db: AsyncSession) -> List[PhotoResponse]:
        """Moderation queue, oldest first."""
        result = await db.execute(
            select(Photo)
            .where(
                or_(
                    and_(Photo.status == PhotoStatus.ACTIVE, Photo.moderated_at.is_(None)),
                    Photo.status == PhotoStatus.FLAGGED,
                )
            )
            .order_by(asc(Photo.created_at))
        )
        return [PhotoResponse.model_validate(p) for p in result.scalars().all()]

    # ── Moderation ────────────────────────────────────────────────────────

    async def flag_photo(self, db: AsyncSession, user: User, photo_id: uuid.UUID) -> PhotoResponse:
        """Any user can report an ACTIVE photo; it stays visible to admins only."""
        photo = await self._get_photo_or_404(db, photo_id)
        if photo.status != PhotoStatus.ACTIVE:
            raise BadRequestError(message="Only active photos can be flagged")

        photo.status = PhotoStatus.FLAGGED
        await db.flush()
        logger.info("Photo %s flagged by %s", photo_id, user.id)
        return await self._response(db, photo_id)

    async def approve_photo(self, db: AsyncSession, admin: User, photo_id: uuid.UUID) -> PhotoResponse:
        photo = await self._get_photo_or_404(db, photo_id)
        if photo.status == PhotoStatus.DELETED:
            raise BadRequestError(message="Photo is already deleted")

        photo.status = PhotoStatus.ACTIVE
        photo.moderated_by = admin.id
        photo.moderated_at = datetime.now(timezone.utc)
        photo.moderation_notes = None
        await db.flush()
        logger.info("Photo %s approved by %s", photo_id, admin.id)
        return await self._response(db, photo_id)

    async def reject_photo(
        self,
        db: AsyncSession,
        admin: User,
        photo_id: uuid.UUID,
        moderation_notes: Optional[str] = None,
    ) -> PhotoResponse:
        photo = await self._get_photo_or_404(db, photo_id)
        if photo.status == PhotoStatus.DELETED:
            raise BadRequestError(message="Photo is already deleted")

        photo.status = PhotoStatus.REJECTED
        photo.moderated_by = admin.id
        photo.moderated_at = datetime.now(timezone.utc)
        photo.moderation_notes = moderation_notes or None
        await db.flush()
        logger.info("Photo %s rejected by %s", photo_id, admin.id)
        return await self._response(db, photo_id)

    async def delete_photo(self, db: AsyncSession, user: User, photo_id: uuid.UUID) -> None:
        """
        Soft delete: the row stays (status DELETED) for the moderation
        history, the stored file is removed.
        """
        photo = await self._get_photo_or_404(db, photo_id)
        if photo.user_id != user.id and not user.is_admin:
            raise ForbiddenError(message="You can only delete your own photos")
        if photo.status == PhotoStatus.DELETED:
            raise BadRequestError(message="Photo is already deleted")

        await storage_service.delete_file(photo.image_url)
        photo.status = PhotoStatus.DELETED
        await db.flush()
        logger.info("Photo %s deleted by %s", photo_id, user.id)


# ── Singleton Instance ────────────────────────────────────────────────────
photo_service = PhotoService()
