"""Favorite response schemas."""

import uuid
from datetime import datetime
from typing import List

from inmaduros.models.enums import RouteLevel
from inmaduros.schemas.common import CamelModel


class FavoriteRoute(CamelModel):
    id: uuid.UUID
    name: str
    slug: str
    image: str
    approximate_distance: str
    description: str
    levels: List[RouteLevel]
    review_count: int = 0
    route_call_count: int = 0


class FavoriteResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    route_id: uuid.UUID
    created_at: datetime
    route: FavoriteRoute


class FavoriteCheckResponse(CamelModel):
    is_favorite: bool
