"""Public projections of a user embedded in other resources."""

import uuid
from typing import Optional

from inmaduros.models.enums import UserRole
from inmaduros.schemas.common import CamelModel


class UserSummary(CamelModel):
    id: uuid.UUID
    name: str
    image_url: Optional[str] = None


class UserWithLastName(UserSummary):
    last_name: Optional[str] = None


class ModeratorSummary(CamelModel):
    id: uuid.UUID
    name: str


class UserProfile(UserWithLastName):
    """The authenticated user's own record (GET /api/auth/me)."""
    email: str
    role: UserRole
