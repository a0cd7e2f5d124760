"""
Los Inmaduros Backend — Clerk Backend API Client
=================================================

What:  Thin async client for the few Clerk Backend API calls the app makes.
Why:   Clerk owns identities. The backend only needs to:
           - read a user's profile when mirroring it locally
           - fetch the JWKS that signs session tokens
           - mint development test tokens (users lookup, session, template token)
How:   httpx.AsyncClient authenticated with CLERK_SECRET_KEY; transient
       failures (network errors, 429, 5xx) are retried by tenacity with
       exponential backoff + jitter.
Who:   UserSyncService, the auth dependencies and the test-token endpoint.

Error Mapping:
    404 from Clerk             → NotFoundError     (404)
    other 4xx                  → IdentityProviderError (502)
    5xx / transport after retries → IdentityProviderError (502)
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from inmaduros.config import settings
from inmaduros.exceptions import IdentityProviderError, NotFoundError

logger = logging.getLogger(__name__)


def _is_transient(exc: BaseException) -> bool:
    """Network failures, rate limiting and server errors are worth a retry."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


class ClerkClient:
    """
    Clerk Backend API wrapper.

    A new AsyncClient is opened per call: calls are rare (first sight of a
    user, JWKS refresh, test tokens), so pooling buys nothing.
    """

    def __init__(self, secret_key: Optional[str] = None, api_url: Optional[str] = None):
        self.secret_key = secret_key if secret_key is not None else settings.clerk_secret_key
        self.api_url = (api_url or settings.clerk_api_url).rstrip("/")

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.secret_key}",
            "Content-Type": "application/json",
        }

    @retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        async with httpx.AsyncClient(
            base_url=self.api_url,
            headers=self._headers(),
            timeout=settings.http_timeout,
        ) as client:
            response = await client.request(method, path, params=params, json=json)
            response.raise_for_status()
            return response.json()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        if not self.secret_key:
            raise IdentityProviderError(
                message="Identity provider is not configured",
                context={"missing": "CLERK_SECRET_KEY"},
            )
        try:
            return await self._send(method, path, params=params, json=json)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise NotFoundError(message="User not found", resource="clerk", context={"path": path})
            logger.error("Clerk API %s %s failed with %d", method, path, status)
            raise IdentityProviderError(context={"path": path, "status": status})
        except httpx.TransportError as e:
            logger.error("Clerk API %s %s unreachable: %s", method, path, str(e))
            raise IdentityProviderError(context={"path": path, "error_type": type(e).__name__})

    # ── Users ─────────────────────────────────────────────────────────────

    async def get_user(self, clerk_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/v1/users/{clerk_id}")

    async def find_users_by_email(self, email: str) -> List[Dict[str, Any]]:
        result = await self._request("GET", "/v1/users", params={"email_address": [email]})
        # The endpoint returns a bare list; some API versions wrap it
        if isinstance(result, dict):
            return result.get("data", [])
        return result

    # ── Sessions & tokens ─────────────────────────────────────────────────

    async def create_session(self, user_id: str) -> Dict[str, Any]:
        return await self._request("POST", "/v1/sessions", json={"user_id": user_id})

    async def create_session_token(self, session_id: str, template: str) -> str:
        result = await self._request("POST", f"/v1/sessions/{session_id}/tokens/{template}")
        return result["jwt"]

    async def get_jwks(self) -> Dict[str, Any]:
        return await self._request("GET", "/v1/jwks")


def primary_email(clerk_user: Dict[str, Any]) -> Optional[str]:
    """
    The user's primary email, falling back to the first listed one.
    """
    addresses = clerk_user.get("email_addresses") or []
    primary_id = clerk_user.get("primary_email_address_id")
    for address in addresses:
        if primary_id and address.get("id") == primary_id:
            return address.get("email_address")
    if addresses:
        return addresses[0].get("email_address")
    return None


# ── Singleton Instance ────────────────────────────────────────────────────
clerk_client = ClerkClient()
