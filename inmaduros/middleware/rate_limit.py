"""
Los Inmaduros Backend — Rate Limiting Middleware
=================================================

What:  Per-IP sliding window rate limiter with one window per path rule.
Why:   Keeps a single client from hammering the API, and guards the auth
       endpoints (which call Clerk) much more strictly.
How:   Tracks request timestamps per (rule, IP) in memory.

Rules (first matching prefix wins):
    /api/auth  →  AUTH_RATE_LIMIT_REQUESTS per AUTH_RATE_LIMIT_WINDOW (5 / 15 min)
    /api/      →  RATE_LIMIT_REQUESTS per RATE_LIMIT_WINDOW           (100 / 15 min)
    anything else (health, docs) is not limited

Algorithm: Sliding Window Log
    1. Each (rule, IP) gets a list of request timestamps
    2. On each request, drop timestamps older than the window
    3. If the remaining count >= limit, reject with 429
    4. Otherwise record the current timestamp and let it through

Production Upgrade Path:
    In-memory state is per process. With several workers or instances,
    move the counters to Redis.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from inmaduros.config import settings
from inmaduros.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


def _rules() -> List[Tuple[str, str, int, int]]:
    """(name, path prefix, max requests, window seconds), most specific first."""
    return [
        ("auth", "/api/auth", settings.auth_rate_limit_requests, settings.auth_rate_limit_window),
        ("api", "/api/", settings.rate_limit_requests, settings.rate_limit_window),
    ]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window rate limiter.

    Limits are read from settings on every request, so tests (and a config
    reload) can change them without rebuilding the app.

    Response on rate limit:
        HTTP 429, `Retry-After` header and the standard error envelope.
    """

    def __init__(self, app, **kwargs):
        super().__init__(app, **kwargs)
        self._requests: Dict[Tuple[str, str], List[float]] = defaultdict(list)
        self._recorded = 0

    def _match_rule(self, path: str) -> Optional[Tuple[str, int, int]]:
        for name, prefix, limit, window in _rules():
            if path.startswith(prefix):
                return name, limit, window
        return None

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not settings.rate_limit_enabled or request.method == "OPTIONS":
            return await call_next(request)

        rule = self._match_rule(request.url.path)
        if rule is None:
            return await call_next(request)
        rule_name, limit, window = rule

        # Behind a proxy this is the proxy's IP unless uvicorn runs with
        # --proxy-headers
        client_ip = request.client.host if request.client else "unknown"
        key = (rule_name, client_ip)

        now = time.time()
        window_start = now - window
        self._requests[key] = [ts for ts in self._requests[key] if ts > window_start]

        if len(self._requests[key]) >= limit:
            oldest = self._requests[key][0]
            retry_after = int(oldest + window - now) + 1

            logger.warning(
                "Rate limit '%s' exceeded for IP %s: %d requests in %ds window",
                rule_name,
                client_ip,
                len(self._requests[key]),
                window,
            )
            message = (
                "Too many authentication attempts, please try again later."
                if rule_name == "auth"
                else "Too many requests from this IP, please try again later."
            )
            return JSONResponse(
                status_code=429,
                content={
                    "success": False,
                    "error": message,
                    "details": {"retry_after": retry_after},
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(retry_after)},
            )

        self._requests[key].append(now)

        # Periodic cleanup of inactive keys (every 1000 recorded requests)
        self._recorded += 1
        if self._recorded % 1000 == 0:
            self._cleanup_inactive(now)

        return await call_next(request)

    def _cleanup_inactive(self, now: float) -> None:
        """Drop keys whose newest request is older than the longest window."""
        longest = max(window for _, _, _, window in _rules())
        cutoff = now - longest
        inactive = [key for key, stamps in self._requests.items() if not stamps or stamps[-1] < cutoff]
        for key in inactive:
            del self._requests[key]

        if inactive:
            logger.debug("Cleaned up %d inactive rate limit entries", len(inactive))
