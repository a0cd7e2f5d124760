"""
Los Inmaduros Backend — Shared API Schemas
===========================================

What:  Base model, response envelopes, pagination and error/health models.
Why:   Every endpoint answers with the same envelope so the frontend can
       handle success and failure uniformly:
           {"success": true,  "data": ..., "count"?: n, "pagination"?: {...}}
           {"success": false, "error": "...", "details"?: ..., "request_id": "..."}
How:   `CamelModel` turns snake_case attributes into camelCase JSON keys and
       reads straight from ORM objects (`from_attributes`). Request bodies
       accept both spellings (`populate_by_name`).
"""

import math
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for every request/response model of the public API."""

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "from_attributes": True,
    }


# ══════════════════════════════════════════════════════════════════════════
# Pagination
# ══════════════════════════════════════════════════════════════════════════

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class Pagination(CamelModel):
    """
    Offset pagination metadata.

    Example:
        {"page": 2, "limit": 20, "totalCount": 45, "totalPages": 3,
         "hasNextPage": true, "hasPreviousPage": true}
    """
    page: int = Field(ge=1, description="Current page (1-based)")
    limit: int = Field(ge=1, le=MAX_PAGE_SIZE, description="Items per page")
    total_count: int = Field(ge=0, description="Items matching the filters")
    total_pages: int = Field(ge=0, description="ceil(totalCount / limit)")
    has_next_page: bool
    has_previous_page: bool

    @classmethod
    def build(cls, page: int, limit: int, total_count: int) -> "Pagination":
        total_pages = math.ceil(total_count / limit) if limit else 0
        return cls(
            page=page,
            limit=limit,
            total_count=total_count,
            total_pages=total_pages,
            has_next_page=page < total_pages,
            has_previous_page=page > 1,
        )

    @staticmethod
    def offset(page: int, limit: int) -> int:
        return (page - 1) * limit


# ══════════════════════════════════════════════════════════════════════════
# Response Envelopes
# ══════════════════════════════════════════════════════════════════════════


class DataResponse(CamelModel, Generic[T]):
    success: bool = True
    data: T


class MessageResponse(CamelModel, Generic[T]):
    """Envelope for mutations: a human-readable message plus the resource."""
    success: bool = True
    message: str
    data: T


class ListResponse(CamelModel, Generic[T]):
    success: bool = True
    data: List[T]
    count: int


class PaginatedResponse(CamelModel, Generic[T]):
    success: bool = True
    data: List[T]
    pagination: Pagination


class SuccessResponse(CamelModel):
    """Envelope for deletes and other mutations without a body."""
    success: bool = True
    message: str


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Models
# ══════════════════════════════════════════════════════════════════════════


class FieldErrorDetail(BaseModel):
    field: str = Field(description="Dotted path of the offending input, e.g. meetingPoints.0.location")
    message: str


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "success": false,
            "error": "Only the organizer can update this route call",
            "request_id": "a1b2c3d4"
        }
    """
    success: bool = False
    error: str = Field(description="Human-readable error description")
    details: Optional[Any] = Field(default=None, description="Field errors or extra context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """
    Health check response showing service and dependency status.

    A backend that can't reach its database is effectively down, so the
    database probe decides between "healthy" and "unhealthy".
    """
    status: str = Field(description="Overall service status: healthy, degraded, unhealthy")
    version: str = Field(description="Application version")
    environment: str = Field(description="Deployment environment")
    database: str = Field(description="Database connectivity: connected, disconnected")
    storage: str = Field(description="Storage backend status: available, unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
