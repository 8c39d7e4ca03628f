"""Per-client request rate limiting"""

from typing import Dict, Tuple
from datetime import datetime, timedelta, timezone
import logging
from landify_api.models.errors import ApplicationError, ErrorCode

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Fixed-window counter keyed by client address.

    Each client gets max_requests per window; the window restarts on the first
    request after it expires.
    """

    def __init__(self, max_requests: int, window_seconds: int):
        self.max_requests = max_requests
        self.window = timedelta(seconds=window_seconds)
        self.windows: Dict[str, Tuple[datetime, int]] = {}

    def hit(self, client_key: str, now: datetime = None) -> int:
        """Count one request; returns the remaining allowance or raises RATE_LIMITED"""
        now = now or datetime.now(timezone.utc)
        started, count = self.windows.get(client_key, (now, 0))
        if now - started >= self.window:
            started, count = now, 0

        if count >= self.max_requests:
            retry_after = int((started + self.window - now).total_seconds()) + 1
            logger.warning(f"[RateLimit] {client_key} exceeded {self.max_requests} requests")
            raise ApplicationError(
                code=ErrorCode.RATE_LIMITED,
                message="Too many requests from this IP, please try again later.",
                retryable=True,
                hint=f"Retry in {retry_after} seconds."
            )

        self.windows[client_key] = (started, count + 1)
        self._evict_expired(now)
        return self.max_requests - count - 1

    def _evict_expired(self, now: datetime):
        expired = [key for key, (started, _) in self.windows.items() if now - started >= self.window]
        for key in expired:
            del self.windows[key]
