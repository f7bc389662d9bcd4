"""Rate limiting middleware using Redis."""
import time
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
import redis.asyncio as redis
import structlog

from humidor_club.core.config import settings
from humidor_club.core.errors import RateLimitError

logger = structlog.get_logger()

EXEMPT_PATHS = {"/health", "/api/health"}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limit requests by client IP in one-minute windows."""

    def __init__(
        self,
        app,
        redis_url: str | None = None,
        requests_per_minute: int = 60,
        auth_requests_per_minute: int = 5,
    ):
        super().__init__(app)
        self.redis_url = redis_url or settings.redis_url
        self.requests_per_minute = requests_per_minute
        self.auth_requests_per_minute = auth_requests_per_minute
        self._redis: redis.Redis | None = None

    async def get_redis(self) -> redis.Redis:
        """Get or create Redis connection."""
        if self._redis is None:
            self._redis = redis.from_url(self.redis_url)
        return self._redis

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_ip = request.client.host if request.client else "unknown"

        # Sign-in endpoints get a stricter budget
        is_auth_endpoint = "/auth/" in request.url.path
        limit = self.auth_requests_per_minute if is_auth_endpoint else self.requests_per_minute

        window = int(time.time() // 60)
        scope = "auth" if is_auth_endpoint else "api"
        key = f"rate_limit:{scope}:{client_ip}:{window}"

        try:
            r = await self.get_redis()
            current = await r.incr(key)
            if current == 1:
                await r.expire(key, 60)
        except (redis.RedisError, OSError) as e:
            # Fail open when Redis is unavailable
            logger.warning("Rate limiter unavailable", error=str(e))
            return await call_next(request)

        if current > limit:
            error = RateLimitError()
            logger.info("Rate limit exceeded", client_ip=client_ip, path=request.url.path, limit=limit)
            return JSONResponse(
                status_code=error.status_code,
                content=error.to_dict(),
                headers=error.headers,
            )

        return await call_next(request)
