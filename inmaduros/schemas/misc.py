"""Schemas for the app-config and auth helper endpoints."""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from inmaduros.schemas.common import CamelModel


class MeetingPointOption(BaseModel):
    name: str
    location: Optional[str] = None


class PaceOption(BaseModel):
    emoji: str
    label: str
    description: str


class AppConfigResponse(CamelModel):
    meeting_points: List[MeetingPointOption]
    route_paces: Dict[str, PaceOption]
    route_levels: List[str]


class TestTokenRequest(CamelModel):
    email: str = Field(default="", max_length=320)


class TestTokenResponse(CamelModel):
    user_id: str
    email: Optional[str] = None
    session_id: str
    token: str
    warning: str = "This endpoint is disabled in production"
    instructions: str = "Send it as: Authorization: Bearer <token>"
