# =============================================================================
# app/middleware.py - Request Gate Chain
# =============================================================================
# Filters applied to every request before it reaches a router:
# - OriginCheckMiddleware: rejects requests from origins outside the allow-list
# - RateLimitMiddleware: fixed-window request budget per client address
#
# Either filter may short-circuit the request with an error response.
# =============================================================================

import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import Request
from fastapi.responses import PlainTextResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from app.exceptions import OriginNotAllowedError, unhandled_exception_handler

logger = logging.getLogger(__name__)


# =============================================================================
# Origin Check
# =============================================================================

class OriginPolicy:
    """
    Origin allow-list with an explicit allow-all mode.

    Example:
        policy = OriginPolicy(allow_all=False, origins=["http://example1.com"])
        policy.is_allowed("http://example1.com")  # True
        policy.is_allowed("http://evil.test")     # False
    """

    def __init__(self, allow_all: bool, origins: list[str]):
        self.allow_all = allow_all
        self.origins = frozenset(origins)

    def is_allowed(self, origin: str | None) -> bool:
        """Check an Origin header value. Requests without one are not cross-origin."""
        if origin is None:
            return True
        return self.allow_all or origin in self.origins

    @property
    def cors_origins(self) -> list[str]:
        """Origins in the form Starlette's CORSMiddleware expects."""
        return ["*"] if self.allow_all else sorted(self.origins)


class OriginCheckMiddleware(BaseHTTPMiddleware):
    """
    Reject requests whose Origin is not allowed.

    Rejections go through the fallback error handler, so the client
    gets the generic 500 body and the origin is only logged.
    """

    def __init__(self, app: ASGIApp, policy: OriginPolicy):
        super().__init__(app)
        self.policy = policy

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        origin = request.headers.get("origin")
        if not self.policy.is_allowed(origin):
            logger.warning(f"Rejected request from origin {origin}")
            return await unhandled_exception_handler(request, OriginNotAllowedError(origin))

        return await call_next(request)


# =============================================================================
# Rate Limiting
# =============================================================================

@dataclass
class RateLimitResult:
    """Outcome of counting one request against a client's window."""
    allowed: bool
    limit: int
    remaining: int
    reset_after: float


class FixedWindowRateLimiter:
    """
    Fixed-window request counter keyed by client address.

    A client's first request opens a window of `window_seconds`; up to
    `max_requests` are allowed inside it and the count resets when it
    elapses. Counters are guarded by a lock so the limiter stays exact
    under multi-threaded servers too.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        # key -> (window start, count)
        self._windows: dict[str, tuple[float, int]] = {}

    def hit(self, key: str) -> RateLimitResult:
        """Count one request for `key` and report whether it is within budget."""
        now = self._clock()

        with self._lock:
            started, count = self._windows.get(key, (now, 0))
            if now - started >= self.window_seconds:
                started, count = now, 0

            count += 1
            self._windows[key] = (started, count)

            # Drop expired windows so idle clients don't accumulate
            if len(self._windows) > 10_000:
                self._prune(now)

        return RateLimitResult(
            allowed=count <= self.max_requests,
            limit=self.max_requests,
            remaining=max(self.max_requests - count, 0),
            reset_after=max(started + self.window_seconds - now, 0.0),
        )

    def reset(self) -> None:
        """Forget every client's counter."""
        with self._lock:
            self._windows.clear()

    def _prune(self, now: float) -> None:
        expired = [
            key for key, (started, _) in self._windows.items()
            if now - started >= self.window_seconds
        ]
        for key in expired:
            del self._windows[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Throttle clients that exceed the limiter's budget.

    Throttled requests get a 429 with a plain-text message and never reach
    a router. Every response carries X-RateLimit-* headers.
    """

    def __init__(self, app: ASGIApp, limiter: FixedWindowRateLimiter, message: str):
        super().__init__(app)
        self.limiter = limiter
        self.message = message

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        client = request.client.host if request.client else "unknown"
        result = self.limiter.hit(client)

        headers = {
            "X-RateLimit-Limit": str(result.limit),
            "X-RateLimit-Remaining": str(result.remaining),
        }

        if not result.allowed:
            logger.warning(f"Rate limit exceeded for {client} on {request.method} {request.url.path}")
            headers["Retry-After"] = str(math.ceil(result.reset_after))
            return PlainTextResponse(self.message, status_code=429, headers=headers)

        response = await call_next(request)
        response.headers.update(headers)
        return response
