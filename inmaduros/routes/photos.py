"""
Los Inmaduros Backend — Photo Handlers
=======================================

What:  Upload, browse and moderate gallery photos.
How:   Uploads are multipart/form-data: the `file` part plus `context`,
       `routeId` / `routeCallId` and `caption` form fields. The form fields
       are re-validated as one PhotoUploadData so the context rules produce
       the same 400 envelope as JSON bodies.

Endpoints:
    POST   /api/photos                                   upload (auth)
    GET    /api/photos                                   list, paginated
    GET    /api/photos/my-photos                         caller's photos (auth)
    GET    /api/photos/pending-review                    moderation queue (admin)
    GET    /api/photos/routes/{slug}/gallery             route gallery
    GET    /api/photos/route-calls/{id}/gallery          route call gallery
    PATCH  /api/photos/route-calls/{id}/cover-photo      replace cover (organizer)
    PATCH  /api/photos/{id}/flag                         report (auth)
    PATCH  /api/photos/{id}/approve                      approve (admin)
    PATCH  /api/photos/{id}/reject                       reject (admin)
    DELETE /api/photos/{id}                              soft delete (owner or admin)
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.auth import get_current_user, require_admin
from inmaduros.database import get_db_session
from inmaduros.models import PhotoContext, PhotoStatus, User
from inmaduros.schemas.common import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    DataResponse,
    ErrorResponse,
    ListResponse,
    MessageResponse,
    PaginatedResponse,
    SuccessResponse,
)
from inmaduros.schemas.photo import (
    PhotoResponse,
    PhotoUploadData,
    RejectPhotoRequest,
    RouteCallGalleryResponse,
    RouteGalleryResponse,
)
from inmaduros.services.photo_service import photo_service

router = APIRouter(prefix="/api/photos", tags=["Photos"])

_upload_errors = {
    400: {"description": "Invalid file or form fields", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    403: {"description": "Not allowed to post to this gallery", "model": ErrorResponse},
    404: {"description": "Route or route call not found", "model": ErrorResponse},
}


@router.post(
    "",
    status_code=201,
    response_model=MessageResponse[PhotoResponse],
    responses=_upload_errors,
    summary="Upload a photo",
)
async def upload_photo(
    file: UploadFile = File(..., description="JPEG, PNG, GIF or WebP image, max 5MB"),
    context: str = Form(...),
    route_id: Optional[str] = Form(None, alias="routeId"),
    route_call_id: Optional[str] = Form(None, alias="routeCallId"),
    caption: Optional[str] = Form(None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    # Empty form fields arrive as "" rather than missing
    data = PhotoUploadData.model_validate(
        {
            "context": context,
            "routeId": route_id or None,
            "routeCallId": route_call_id or None,
            "caption": caption or None,
        }
    )
    content = await file.read()
    photo = await photo_service.upload_photo(
        db,
        user,
        data,
        content=content,
        filename=file.filename or "",
        content_type=file.content_type or "",
    )
    return MessageResponse[PhotoResponse](message="Photo uploaded successfully", data=photo)


@router.get(
    "",
    response_model=PaginatedResponse[PhotoResponse],
    summary="List photos",
)
async def list_photos(
    context: Optional[PhotoContext] = Query(None),
    route_id: Optional[uuid.UUID] = Query(None, alias="routeId"),
    route_call_id: Optional[uuid.UUID] = Query(None, alias="routeCallId"),
    status: PhotoStatus = Query(PhotoStatus.ACTIVE),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db_session),
):
    items, pagination = await photo_service.list_photos(
        db,
        page=page,
        limit=limit,
        context=context,
        route_id=route_id,
        route_call_id=route_call_id,
        status=status,
    )
    return PaginatedResponse[PhotoResponse](data=items, pagination=pagination)


@router.get(
    "/my-photos",
    response_model=ListResponse[PhotoResponse],
    summary="List the caller's photos",
)
async def my_photos(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    photos = await photo_service.list_user_photos(db, user)
    return ListResponse[PhotoResponse](data=photos, count=len(photos))


@router.get(
    "/pending-review",
    response_model=ListResponse[PhotoResponse],
    responses={403: {"description": "Admin access required", "model": ErrorResponse}},
    summary="Moderation queue",
)
async def pending_review(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    photos = await photo_service.list_pending_photos(db)
    return ListResponse[PhotoResponse](data=photos, count=len(photos))


@router.get(
    "/routes/{slug}/gallery",
    response_model=DataResponse[RouteGalleryResponse],
    responses={404: {"description": "Route not found", "model": ErrorResponse}},
    summary="Route gallery",
)
async def route_gallery(slug: str, db: AsyncSession = Depends(get_db_session)):
    gallery = await photo_service.get_route_gallery(db, slug)
    return DataResponse[RouteGalleryResponse](data=gallery)


@router.get(
    "/route-calls/{route_call_id}/gallery",
    response_model=DataResponse[RouteCallGalleryResponse],
    responses={404: {"description": "Route call not found", "model": ErrorResponse}},
    summary="Route call gallery",
)
async def route_call_gallery(route_call_id: uuid.UUID, db: AsyncSession = Depends(get_db_session)):
    gallery = await photo_service.get_route_call_gallery(db, route_call_id)
    return DataResponse[RouteCallGalleryResponse](data=gallery)


@router.patch(
    "/route-calls/{route_call_id}/cover-photo",
    response_model=MessageResponse[PhotoResponse],
    responses=_upload_errors,
    summary="Replace a route call cover photo",
)
async def update_cover_photo(
    route_call_id: uuid.UUID,
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    content = await file.read()
    photo = await photo_service.update_cover_photo(
        db,
        user,
        route_call_id,
        content=content,
        filename=file.filename or "",
        content_type=file.content_type or "",
    )
    return MessageResponse[PhotoResponse](message="Cover photo updated successfully", data=photo)


@router.patch(
    "/{photo_id}/flag",
    response_model=MessageResponse[PhotoResponse],
    responses={400: {"description": "Photo is not active", "model": ErrorResponse}},
    summary="Report a photo for review",
)
async def flag_photo(
    photo_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    photo = await photo_service.flag_photo(db, user, photo_id)
    return MessageResponse[PhotoResponse](message="Photo flagged for review", data=photo)


@router.patch(
    "/{photo_id}/approve",
    response_model=MessageResponse[PhotoResponse],
    responses={403: {"description": "Admin access required", "model": ErrorResponse}},
    summary="Approve a photo",
)
async def approve_photo(
    photo_id: uuid.UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    photo = await photo_service.approve_photo(db, admin, photo_id)
    return MessageResponse[PhotoResponse](message="Photo approved successfully", data=photo)


@router.patch(
    "/{photo_id}/reject",
    response_model=MessageResponse[PhotoResponse],
    responses={403: {"description": "Admin access required", "model": ErrorResponse}},
    summary="Reject a photo",
)
async def reject_photo(
    photo_id: uuid.UUID,
    data: Optional[RejectPhotoRequest] = Body(None),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
):
    notes = data.moderation_notes if data is not None else None
    photo = await photo_service.reject_photo(db, admin, photo_id, notes)
    return MessageResponse[PhotoResponse](message="Photo rejected successfully", data=photo)


@router.delete(
    "/{photo_id}",
    response_model=SuccessResponse,
    responses={403: {"description": "Not the owner or an admin", "model": ErrorResponse}},
    summary="Delete a photo",
)
async def delete_photo(
    photo_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
):
    await photo_service.delete_photo(db, user, photo_id)
    return SuccessResponse(message="Photo deleted successfully")
