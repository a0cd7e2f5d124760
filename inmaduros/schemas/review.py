"""Review request/response schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field

from inmaduros.schemas.common import CamelModel
from inmaduros.schemas.user import UserSummary


class ReviewCreate(CamelModel):
    rating: int = Field(ge=1, le=5, description="Whole stars, 1 to 5")
    comment: Optional[str] = Field(default=None, max_length=500)


class ReviewUpdate(CamelModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    comment: Optional[str] = Field(default=None, max_length=500)


class ReviewResponse(CamelModel):
    id: uuid.UUID
    route_id: uuid.UUID
    user_id: uuid.UUID
    rating: int
    comment: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    user: UserSummary
