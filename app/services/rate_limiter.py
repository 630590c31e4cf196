import time
from collections.abc import Callable

from cachetools import TTLCache
from loguru import logger

from app.core.config import settings


class RateLimiter:
    """Fixed-window request counter per client id. A limit of 0 disables it."""

    def __init__(
        self,
        limit: int = settings.RATE_LIMIT_PER_MINUTE,
        window_seconds: float = 60.0,
        maxsize: int = 10000,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.limit = limit
        self.window_seconds = window_seconds
        self._timer = timer
        # client id -> (window start, hits); stale windows age out on their own
        self._windows: TTLCache = TTLCache(maxsize=maxsize, ttl=window_seconds, timer=timer)

    @property
    def enabled(self) -> bool:
        return self.limit > 0

    def hit(self, client_id: str) -> bool:
        """Count one request for ``client_id``. False once the window's limit is spent."""
        if not self.enabled:
            return True
        now = self._timer()
        started, hits = self._windows.get(client_id, (now, 0))
        if now - started >= self.window_seconds:
            started, hits = now, 0
        if hits >= self.limit:
            logger.warning(f"Rate limit exceeded for client {client_id}")
            return False
        self._windows[client_id] = (started, hits + 1)
        return True

    def reset(self) -> None:
        self._windows.clear()
