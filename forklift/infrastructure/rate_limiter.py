"""
Tracking of GitHub's rate-limit headers.

Every API response reports the remaining quota. The limiter keeps the
latest snapshot and, when the quota is spent, holds new requests until the
window resets (bounded by ``max_delay``).
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from .logger import logger


@dataclass
class RateLimitInfo:
    """Snapshot of the x-ratelimit-* response headers."""

    limit: Optional[int] = None
    remaining: Optional[int] = None
    used: Optional[int] = None
    reset_time: Optional[datetime] = None

    @property
    def is_exhausted(self) -> bool:
        return self.remaining is not None and self.remaining <= 0

    @property
    def reset_in_seconds(self) -> float:
        if self.reset_time is None:
            return 0.0
        return max((self.reset_time - datetime.now()).total_seconds(), 0.0)

    def as_dict(self) -> dict:
        return {
            "limit": self.limit,
            "remaining": self.remaining,
            "used": self.used,
            "reset_time": self.reset_time.isoformat() if self.reset_time else None,
        }


def _int_header(headers: Mapping[str, str], name: str) -> Optional[int]:
    value = headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        logger.debug(f"Ignoring malformed {name} header: {value!r}")
        return None


class RateLimiter:
    """Keeps the latest rate-limit snapshot shared by all page tasks."""

    def __init__(self, max_delay: float = 60.0):
        self.max_delay = max_delay
        self.rate_limit_info = RateLimitInfo()
        self._lock = asyncio.Lock()

    async def update_rate_limit_info(self, headers: Mapping[str, str]) -> None:
        """Record the quota reported by a response."""

        async with self._lock:
            info = self.rate_limit_info
            limit = _int_header(headers, "x-ratelimit-limit")
            remaining = _int_header(headers, "x-ratelimit-remaining")
            used = _int_header(headers, "x-ratelimit-used")
            reset = _int_header(headers, "x-ratelimit-reset")

            if limit is not None:
                info.limit = limit
            if remaining is not None:
                info.remaining = remaining
            if used is not None:
                info.used = used
            if reset is not None:
                info.reset_time = datetime.fromtimestamp(reset)

    async def acquire(self) -> None:
        """Wait for the quota window to reset if the last response spent it."""

        async with self._lock:
            if not self.rate_limit_info.is_exhausted:
                return
            delay = min(self.rate_limit_info.reset_in_seconds, self.max_delay)

        if delay > 0:
            logger.warning(f"Rate limit exhausted, waiting {delay:.1f}s for reset")
            await asyncio.sleep(delay)


__all__ = ["RateLimitInfo", "RateLimiter"]
