"""
Rate limiting for import/export endpoints
"""
import time
from collections import defaultdict, deque
from fastapi import Request, HTTPException
from typing import Deque, Dict, Iterable, Optional
import logging

from interchange.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory sliding-window rate limiter, per client address

    Bulk imports are expensive, so every route except the exempt ones is
    counted against a per-minute and a per-hour budget.
    """

    EXEMPT_PATHS = ("/health", "/docs", "/redoc", "/openapi.json")

    def __init__(
        self,
        requests_per_minute: int = 60,
        requests_per_hour: int = 1000,
        exempt_paths: Optional[Iterable[str]] = None,
    ):
        self.windows = ((60, requests_per_minute, "minute"), (3600, requests_per_hour, "hour"))
        self.exempt_paths = set(exempt_paths if exempt_paths is not None else self.EXEMPT_PATHS)
        self.history: Dict[str, Deque[float]] = defaultdict(deque)

    def is_exempt(self, path: str) -> bool:
        return path in self.exempt_paths

    def _client_id(self, request: Request) -> str:
        return request.client.host if request.client else "unknown"

    def _cleanup_old_entries(self, now: float) -> None:
        """Drop timestamps older than the widest window and forget idle clients"""
        cutoff = now - max(seconds for seconds, _, _ in self.windows)

        for client_id in list(self.history.keys()):
            timestamps = self.history[client_id]
            while timestamps and timestamps[0] <= cutoff:
                timestamps.popleft()

            # Remove empty entries
            if not timestamps:
                del self.history[client_id]

    def check(self, client_id: str, now: Optional[float] = None) -> None:
        """
        Record a request for `client_id`

        Raises:
            HTTPException: 429 if a window budget is exhausted
        """
        now = time.time() if now is None else now
        self._cleanup_old_entries(now)
        timestamps = self.history[client_id]

        for seconds, limit, label in self.windows:
            recent = sum(1 for ts in timestamps if ts > now - seconds)
            if recent >= limit:
                logger.warning(f"Rate limit exceeded ({label}): {client_id}")
                raise HTTPException(
                    status_code=429,
                    detail={
                        "error": "rate_limit_exceeded",
                        "message": f"Too many requests. Limit: {limit} requests per {label}",
                        "retry_after": seconds,
                    },
                )

        timestamps.append(now)

    async def check_rate_limit(self, request: Request) -> None:
        self.check(self._client_id(request))


# Global instance
rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR,
)
