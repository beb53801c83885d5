"""
Rate limiting middleware using token bucket algorithm.

Each client IP gets one bucket for authentication endpoints and one
for everything else. Tokens refill continuously; a request with no
token left is rejected with 429.

Note: buckets live in process memory and are not shared across workers.
"""

import time
from typing import Callable, Dict, Tuple

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from skillz.core.logging_config import get_logger


logger = get_logger(__name__)

# Buckets idle for this long are dropped
BUCKET_TTL_SECONDS = 600


class TokenBucket:
    """
    Token bucket for rate limiting.

    Attributes:
        capacity: Maximum number of tokens in the bucket
        refill_rate: Number of tokens added per second
        tokens: Current number of available tokens
        last_refill: Timestamp of last refill operation
    """

    def __init__(self, capacity: int, refill_rate: float):
        self.capacity = capacity
        self.refill_rate = refill_rate
        self.tokens = float(capacity)
        self.last_refill = time.monotonic()

    def consume(self, tokens: int = 1) -> bool:
        """
        Attempt to consume tokens from the bucket.

        Returns:
            True if tokens were available and consumed, False otherwise
        """
        now = time.monotonic()
        self.tokens = min(
            self.capacity,
            self.tokens + (now - self.last_refill) * self.refill_rate,
        )
        self.last_refill = now

        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    def get_wait_time(self) -> float:
        """Seconds until the next token is available."""
        if self.tokens >= 1:
            return 0.0
        return (1 - self.tokens) / self.refill_rate


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Per-IP rate limiting, stricter on ``/auth`` endpoints.

    Example:
        app.add_middleware(
            RateLimitMiddleware,
            auth_limit=10,
            default_limit=120,
            enabled=settings.rate_limit_enabled,
        )
    """

    def __init__(
        self,
        app,
        auth_limit: int = 10,
        default_limit: int = 120,
        enabled: bool = True,
        cleanup_interval: int = 300,
    ):
        """
        Args:
            app: ASGI application
            auth_limit: Requests per minute for auth endpoints
            default_limit: Requests per minute for other endpoints
            enabled: When False every request passes through
            cleanup_interval: Seconds between cleanup of idle buckets
        """
        super().__init__(app)
        self.auth_limit = auth_limit
        self.default_limit = default_limit
        self.enabled = enabled
        self.cleanup_interval = cleanup_interval

        # {(ip, scope): (bucket, last_access_time)}
        self.buckets: Dict[Tuple[str, str], Tuple[TokenBucket, float]] = {}
        self.last_cleanup = time.monotonic()

        logger.info(
            "Rate limiting initialized",
            extra={
                "enabled": enabled,
                "auth_limit": auth_limit,
                "default_limit": default_limit,
            },
        )

    def _get_client_ip(self, request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        if request.client:
            return request.client.host
        return "unknown"

    def _get_scope(self, path: str) -> Tuple[str, int]:
        if "/auth" in path:
            return "auth", self.auth_limit
        return "default", self.default_limit

    def _get_or_create_bucket(self, key: Tuple[str, str], limit: int) -> TokenBucket:
        now = time.monotonic()
        if now - self.last_cleanup > self.cleanup_interval:
            self._cleanup_old_buckets(now)

        entry = self.buckets.get(key)
        bucket = entry[0] if entry else TokenBucket(capacity=limit, refill_rate=limit / 60.0)
        self.buckets[key] = (bucket, now)
        return bucket

    def _cleanup_old_buckets(self, now: float) -> None:
        stale = [
            key for key, (_, last_access) in self.buckets.items()
            if now - last_access > BUCKET_TTL_SECONDS
        ]
        for key in stale:
            del self.buckets[key]
        if stale:
            logger.info("Cleaned up old rate limit buckets", extra={"count": len(stale)})
        self.last_cleanup = now

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if not self.enabled:
            return await call_next(request)

        client_ip = self._get_client_ip(request)
        path = request.url.path
        scope, limit = self._get_scope(path)
        bucket = self._get_or_create_bucket((client_ip, scope), limit)

        if not bucket.consume():
            retry_after = int(bucket.get_wait_time()) + 1
            logger.warning(
                "Rate limit exceeded",
                extra={
                    "client_ip": client_ip,
                    "path": path,
                    "limit": limit,
                    "request_id": getattr(request.state, "request_id", None),
                },
            )
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "detail": "Rate limit exceeded",
                    "limit": limit,
                    "window": "1 minute",
                    "retry_after": retry_after,
                },
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(int(bucket.tokens))
        return response
