from __future__ import annotations

import logging
import time
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from todo_api.core.cache import Cache, get_cache
from todo_api.core.error_handlers import error_response
from todo_api.core.errors import RateLimited

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window request throttle per client address."""

    def __init__(
        self,
        app,
        limit_per_minute: int,
        cache_provider: Callable[[], Cache] = get_cache,
    ) -> None:
        super().__init__(app)
        self.limit_per_minute = limit_per_minute
        self._cache_provider = cache_provider

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if self.limit_per_minute <= 0:
            return await call_next(request)

        ip = request.client.host if request.client else "unknown"
        window = int(time.time() // WINDOW_SECONDS)
        key = f"rl:{ip}:{window}"
        count = self._cache_provider().hit(key, WINDOW_SECONDS * 1000)
        if count > self.limit_per_minute:
            logger.warning("rate limit exceeded for %s (%d/%d)", ip, count, self.limit_per_minute)
            return error_response(
                RateLimited.status_code,
                RateLimited.default_message,
                code=RateLimited.error_code,
                headers={"Retry-After": str(WINDOW_SECONDS)},
            )
        return await call_next(request)
