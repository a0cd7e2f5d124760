"""
Photo gallery schemas.

Uploads arrive as multipart form fields; `PhotoUploadData` re-validates
them as one object so the context rules (which parent id is required) live
next to the field definitions.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field, model_validator

from inmaduros.models.enums import PhotoContext, PhotoStatus
from inmaduros.schemas.common import CamelModel
from inmaduros.schemas.user import ModeratorSummary, UserSummary

ROUTE_CALL_CONTEXTS = (PhotoContext.ROUTE_CALL_COVER, PhotoContext.ROUTE_CALL_GALLERY)


class PhotoUploadData(CamelModel):
    context: PhotoContext
    route_id: Optional[uuid.UUID] = None
    route_call_id: Optional[uuid.UUID] = None
    caption: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def check_context_target(self) -> "PhotoUploadData":
        if self.route_id and self.route_call_id:
            raise ValueError("Cannot provide both routeId and routeCallId")
        if self.context == PhotoContext.ROUTE_GALLERY and not self.route_id:
            raise ValueError("routeId is required for ROUTE_GALLERY context")
        if self.context in ROUTE_CALL_CONTEXTS and not self.route_call_id:
            raise ValueError(
                "routeCallId is required for ROUTE_CALL_COVER and ROUTE_CALL_GALLERY contexts"
            )
        return self


class RejectPhotoRequest(CamelModel):
    moderation_notes: Optional[str] = Field(default=None, max_length=500)


class PhotoRouteRef(CamelModel):
    id: uuid.UUID
    name: str
    slug: str


class PhotoRouteCallRef(CamelModel):
    id: uuid.UUID
    title: str


class PhotoResponse(CamelModel):
    id: uuid.UUID
    context: PhotoContext
    route_id: Optional[uuid.UUID] = None
    route_call_id: Optional[uuid.UUID] = None
    user_id: uuid.UUID
    image_url: str
    caption: Optional[str] = None
    status: PhotoStatus
    moderated_by: Optional[uuid.UUID] = None
    moderated_at: Optional[datetime] = None
    moderation_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    user: UserSummary
    route: Optional[PhotoRouteRef] = None
    route_call: Optional[PhotoRouteCallRef] = None
    moderator: Optional[ModeratorSummary] = None


class GalleryRoute(CamelModel):
    id: uuid.UUID
    name: str


class RouteGalleryResponse(CamelModel):
    route: GalleryRoute
    photos: List[PhotoResponse]
    count: int


class RouteCallGalleryResponse(CamelModel):
    route_call: PhotoRouteCallRef
    photos: List[PhotoResponse]
    count: int
