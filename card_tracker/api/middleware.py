"""FastAPI middleware for request tracing, metrics, security headers and rate limiting"""

import uuid
import time
from typing import Callable, Dict, Tuple
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from card_tracker.domain.exceptions import RateLimitExceeded
from card_tracker.infrastructure.observability.logging import log_request
from card_tracker.infrastructure.observability.metrics import rate_limited_counter, request_duration_histogram


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add unique request ID to each request and log its outcome"""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start_time = time.time()

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        log_request(request_id, request.method, request.url.path, response.status_code, (time.time() - start_time) * 1000)
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP request metrics"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        duration = time.time() - start_time
        # Route template keeps ids out of the label set
        route = request.scope.get("route")
        endpoint = getattr(route, "path", request.url.path)
        request_duration_histogram.labels(
            method=request.method,
            endpoint=endpoint,
            status=response.status_code,
        ).observe(duration)

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Conservative browser security headers on every response"""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "SAMEORIGIN",
        "Referrer-Policy": "no-referrer",
        "Cross-Origin-Resource-Policy": "same-origin",
        "X-DNS-Prefetch-Control": "off",
    }

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in self.HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class FixedWindowRateLimiter:
    """
    Counts requests per key in fixed windows.

    State is per process; with several workers each one enforces the limit
    on its own share of the traffic.
    """

    MAX_TRACKED_KEYS = 10_000

    def __init__(self, limit: int, window_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, Tuple[float, int]] = {}

    def hit(self, key: str) -> Tuple[bool, int, float]:
        """Register one request; returns (allowed, remaining, seconds until reset)"""
        now = self.clock()
        if len(self._windows) > self.MAX_TRACKED_KEYS:
            self._purge(now)

        started, count = self._windows.get(key, (now, 0))
        if now - started >= self.window_seconds:
            started, count = now, 0

        reset_in = self.window_seconds - (now - started)
        if count >= self.limit:
            self._windows[key] = (started, count)
            return False, 0, reset_in

        count += 1
        self._windows[key] = (started, count)
        return True, self.limit - count, reset_in

    def _purge(self, now: float) -> None:
        expired = [key for key, (started, _) in self._windows.items() if now - started >= self.window_seconds]
        for key in expired:
            del self._windows[key]


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Admission control for the API prefix, keyed by client address"""

    def __init__(self, app: ASGIApp, limiter: FixedWindowRateLimiter, prefix: str = "/api"):
        super().__init__(app)
        self.limiter = limiter
        self.prefix = prefix

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith(self.prefix):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        allowed, remaining, reset_in = self.limiter.hit(client)
        headers = {
            "X-RateLimit-Limit": str(self.limiter.limit),
            "X-RateLimit-Remaining": str(remaining),
        }

        if not allowed:
            rate_limited_counter.inc()
            error = RateLimitExceeded()
            headers["Retry-After"] = str(max(1, int(reset_in)))
            return JSONResponse(
                status_code=error.status_code,
                content={"success": False, "error": error.message},
                headers=headers,
            )

        response: Response = await call_next(request)
        response.headers.update(headers)
        return response
