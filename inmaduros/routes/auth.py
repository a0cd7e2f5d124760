"""
Los Inmaduros Backend — Auth Handlers
======================================

What:  The caller's profile and a development helper to mint Clerk tokens.
Why:   The frontend signs in through Clerk directly; the backend only needs
       to expose who the caller is. Testing the API from curl or Swagger
       needs a real session token, which `test-token` produces.

Endpoints:
    GET  /api/auth/me           local profile of the caller (auth)
    POST /api/auth/test-token   mint a session token (non-production only,
                                registered conditionally in main.create_app)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from inmaduros.auth import get_current_user
from inmaduros.config import settings
from inmaduros.exceptions import BadRequestError, NotFoundError
from inmaduros.models import User
from inmaduros.schemas.common import DataResponse, ErrorResponse
from inmaduros.schemas.misc import TestTokenRequest, TestTokenResponse
from inmaduros.schemas.user import UserProfile
from inmaduros.services.clerk_service import clerk_client, primary_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])
test_token_router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.get(
    "/me",
    response_model=DataResponse[UserProfile],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Current user profile",
)
async def get_me(user: User = Depends(get_current_user)):
    return DataResponse[UserProfile](data=UserProfile.model_validate(user))


@test_token_router.post(
    "/test-token",
    response_model=DataResponse[TestTokenResponse],
    responses={
        400: {"description": "Email is required", "model": ErrorResponse},
        404: {"description": "Unknown Clerk user", "model": ErrorResponse},
        502: {"description": "Clerk API unavailable", "model": ErrorResponse},
    },
    summary="Mint a Clerk session token for testing",
)
async def create_test_token(data: Optional[TestTokenRequest] = None):
    """
    Looks the email up in Clerk, opens a session for that user and returns a
    token from the configured JWT template.
    """
    email = data.email.strip() if data is not None else ""
    if not email:
        raise BadRequestError(message="Email is required")

    users = await clerk_client.find_users_by_email(email)
    if not users:
        raise NotFoundError(
            message="User not found. Create user in Clerk dashboard first.",
            resource="clerk_user",
        )

    clerk_user = users[0]
    session = await clerk_client.create_session(clerk_user["id"])
    token = await clerk_client.create_session_token(session["id"], settings.clerk_test_token_template)
    logger.info("Test token issued for Clerk user %s", clerk_user["id"])

    return DataResponse[TestTokenResponse](
        data=TestTokenResponse(
            user_id=clerk_user["id"],
            email=primary_email(clerk_user),
            session_id=session["id"],
            token=token,
        )
    )
