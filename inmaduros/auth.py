"""
Los Inmaduros Backend — Authentication Dependencies
====================================================

What:  FastAPI dependencies that turn a Clerk session token into a local User.
Why:   Route handlers declare what they need (`get_current_user`,
       `require_admin`, `optional_auth`) and never touch tokens themselves.
How:   1. Read the bearer token from the Authorization header
       2. Verify it as an RS256 JWT with python-jose, against CLERK_JWT_KEY
          (PEM, networkless) or the Clerk JWKS (fetched once, cached)
       3. Check the `azp` claim when CLERK_AUTHORIZED_PARTIES is set
       4. Map `sub` to a local user through UserSyncService

Failure Responses:
    no header                → 401 "No authentication token provided"
    bad signature / expired  → 401 "Invalid authentication token"
    anything else            → 401 "Authentication failed"
    non-admin on admin route → 403 "Admin access required"
"""

import logging
import time
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from inmaduros.config import settings
from inmaduros.database import get_db_session
from inmaduros.exceptions import ForbiddenError, InmadurosError, UnauthorizedError
from inmaduros.models import User
from inmaduros.services.clerk_service import clerk_client
from inmaduros.services.user_sync_service import user_sync_service

logger = logging.getLogger(__name__)

# auto_error=False: missing credentials are reported with our own envelope
bearer_scheme = HTTPBearer(auto_error=False)

JWKS_CACHE_TTL = 3600  # seconds
_jwks_cache: Dict[str, Any] = {"keys": None, "fetched_at": 0.0}


async def _get_verification_key() -> Any:
    if settings.clerk_jwt_key:
        return settings.clerk_jwt_key.replace("\\n", "\n")

    now = time.monotonic()
    if _jwks_cache["keys"] is None or now - _jwks_cache["fetched_at"] > JWKS_CACHE_TTL:
        _jwks_cache["keys"] = await clerk_client.get_jwks()
        _jwks_cache["fetched_at"] = now
        logger.info("Clerk JWKS refreshed")
    return _jwks_cache["keys"]


def clear_jwks_cache() -> None:
    _jwks_cache["keys"] = None
    _jwks_cache["fetched_at"] = 0.0


async def verify_session_token(token: str) -> Dict[str, Any]:
    """
    Verify a Clerk session token and return its claims.

    Raises:
        UnauthorizedError: signature, expiry or authorized party rejected
    """
    key = await _get_verification_key()
    try:
        claims = jwt.decode(
            token,
            key,
            algorithms=["RS256"],
            # Clerk session tokens carry no audience
            options={"verify_aud": False},
        )
    except JWTError as e:
        logger.info("Rejected session token: %s", str(e))
        raise UnauthorizedError(message="Invalid authentication token")

    allowed_parties = settings.clerk_authorized_parties_list
    if allowed_parties and claims.get("azp") not in allowed_parties:
        logger.warning("Rejected token from unauthorized party: %s", claims.get("azp"))
        raise UnauthorizedError(message="Invalid authentication token")

    if not claims.get("sub"):
        raise UnauthorizedError(message="Invalid authentication token")
    return claims


async def _authenticate(credentials: Optional[HTTPAuthorizationCredentials], db: AsyncSession) -> User:
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(message="No authentication token provided")

    claims = await verify_session_token(credentials.credentials)
    try:
        return await user_sync_service.get_or_create_user(db, claims["sub"])
    except InmadurosError as e:
        logger.error("User sync failed for %s: %s", claims["sub"], e.message)
        raise UnauthorizedError(message="Authentication failed")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """Authenticated user or 401."""
    return await _authenticate(credentials, db)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    """Authenticated ADMIN or 403."""
    if not user.is_admin:
        raise ForbiddenError(message="Admin access required")
    return user


async def optional_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[User]:
    """The caller if a valid token is present, otherwise None. Never fails."""
    if credentials is None:
        return None
    try:
        return await _authenticate(credentials, db)
    except InmadurosError:
        return None
