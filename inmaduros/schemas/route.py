"""Route catalog schemas."""

import uuid
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import List

from pydantic import field_validator

from inmaduros.models.enums import RouteLevel
from inmaduros.schemas.common import CamelModel
from inmaduros.schemas.photo import PhotoResponse
from inmaduros.schemas.review import ReviewResponse


class RouteSummary(CamelModel):
    """Compact route shown inside route calls."""
    id: uuid.UUID
    name: str
    slug: str
    image: str
    approximate_distance: str
    levels: List[RouteLevel]


class RouteResponse(RouteSummary):
    description: str
    map_embed_url: str
    created_at: datetime
    updated_at: datetime
    review_count: int = 0
    favorite_count: int = 0
    route_call_count: int = 0
    photo_count: int = 0
    average_rating: float = 0.0

    @field_validator("average_rating", mode="before")
    @classmethod
    def round_rating(cls, v) -> float:
        """One decimal rounded half up (4.25 → 4.3), 0 when the route has no reviews."""
        rating = Decimal(str(float(v or 0)))
        return float(rating.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class RouteDetailResponse(RouteResponse):
    reviews: List[ReviewResponse] = []
    photos: List[PhotoResponse] = []
