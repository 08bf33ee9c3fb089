# synqit/core/rate_limit.py
"""
In-memory sliding window rate limiting, keyed per client IP.

Each limiter is a FastAPI dependency; routers attach them with
`dependencies=[Depends(general_limiter)]`. State lives in the process, so
counts are per worker.
"""
import logging
from time import monotonic
from typing import Callable

from fastapi import Request, status

from synqit.config import settings
from synqit.core.errors import AppError

logger = logging.getLogger("uvicorn.error")


class RateLimiter:
    """
    Sliding window counter.

    Args:
        name: Prefix for the storage key, so limiters never share counts
        max_requests: Allowed requests per window
        window_sec: Window length in seconds
        message: Message returned with the 429 response
        clock: Time source (monotonic seconds), replaceable in tests
    """

    def __init__(
        self,
        name: str,
        max_requests: int,
        window_sec: int,
        message: str = "Too many requests from this IP, please try again later.",
        clock: Callable[[], float] = monotonic,
    ):
        self.name = name
        self.max_requests = max_requests
        self.window_sec = window_sec
        self.message = message
        self.clock = clock
        self._hits: dict[str, list[float]] = {}
        self._last_sweep = clock()

    def _prune(self, key: str, now: float) -> list[float]:
        cutoff = now - self.window_sec
        hits = [t for t in self._hits.get(key, ()) if t > cutoff]
        if hits:
            self._hits[key] = hits
        else:
            # Idle clients hold no entry
            self._hits.pop(key, None)
        return hits

    def hit(self, client: str) -> bool:
        """Record a request; returns False when the client is over the limit."""
        key = f"{self.name}:{client}"
        now = self.clock()
        if now - self._last_sweep >= self.window_sec:
            self.sweep()
        hits = self._prune(key, now)
        if len(hits) >= self.max_requests:
            return False
        hits.append(now)
        self._hits[key] = hits
        return True

    def sweep(self) -> int:
        """Drop every client whose window has fully elapsed; returns how many were dropped."""
        now = self.clock()
        self._last_sweep = now
        before = len(self._hits)
        for key in list(self._hits):
            self._prune(key, now)
        return before - len(self._hits)

    @property
    def tracked_clients(self) -> int:
        return len(self._hits)

    def remaining(self, client: str) -> int:
        key = f"{self.name}:{client}"
        return max(0, self.max_requests - len(self._prune(key, self.clock())))

    def reset(self) -> None:
        self._hits.clear()

    async def __call__(self, request: Request) -> None:
        if not settings.rate_limit_enabled:
            return
        client = request.client.host if request.client else "unknown"
        if not self.hit(client):
            logger.warning("[rate-limit] %s exceeded for %s on %s", self.name, client, request.url.path)
            raise AppError(self.message, status.HTTP_429_TOO_MANY_REQUESTS)


general_limiter = RateLimiter(
    "general",
    settings.general_rate_limit,
    settings.general_rate_window_sec,
)

auth_limiter = RateLimiter(
    "auth",
    settings.auth_rate_limit,
    settings.auth_rate_window_sec,
    message="Too many authentication attempts from this IP, please try again later.",
)

message_limiter = RateLimiter(
    "messages",
    settings.message_rate_limit,
    settings.message_rate_window_sec,
    message="Message rate limit exceeded. Please try again later.",
)

ALL_LIMITERS = (general_limiter, auth_limiter, message_limiter)
