"""
Retry with exponential backoff for transient GitHub API failures.
"""

import asyncio
import random
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Tuple, Type, TypeVar

from .error_handler import RETRYABLE_ERRORS
from .logger import logger


T = TypeVar("T")


@dataclass
class RetryConfig:
    """Backoff policy: 2s, 4s, 8s by default."""

    max_retries: int = 3
    initial_delay: float = 2.0
    max_delay: float = 8.0
    backoff_factor: float = 2.0
    retryable_errors: Tuple[Type[BaseException], ...] = field(
        default_factory=lambda: RETRYABLE_ERRORS
    )


class RetryManager:
    """
    Runs an async callable, retrying retryable failures with exponential backoff.

    The delay before retry ``n`` (0-based) is ``base_delay * exponential_base ** n``
    capped at ``max_delay``, optionally with +/-20% jitter.
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay: float = 2.0,
        max_delay: float = 8.0,
        exponential_base: float = 2.0,
        jitter: bool = False,
        retryable_errors: Tuple[Type[BaseException], ...] = RETRYABLE_ERRORS
    ):
        if max_retries < 0:
            raise ValueError("max_retries cannot be negative")

        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter
        self.retryable_errors = retryable_errors

    @classmethod
    def from_config(cls, config: RetryConfig, jitter: bool = False) -> "RetryManager":
        return cls(
            max_retries=config.max_retries,
            base_delay=config.initial_delay,
            max_delay=config.max_delay,
            exponential_base=config.backoff_factor,
            jitter=jitter,
            retryable_errors=config.retryable_errors,
        )

    def _calculate_delay(self, attempt: int) -> float:
        """Delay in seconds to wait after failed attempt number ``attempt`` (0-based)."""

        delay = min(self.base_delay * (self.exponential_base ** attempt), self.max_delay)
        if self.jitter:
            delay *= random.uniform(0.8, 1.2)
        return delay

    async def execute(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        exceptions: Optional[Tuple[Type[BaseException], ...]] = None,
        max_retries: Optional[int] = None,
        **kwargs: Any
    ) -> T:
        """
        Await ``func(*args, **kwargs)``, retrying on ``exceptions``.

        Args:
            func: Coroutine function to call
            exceptions: Exception types worth retrying (defaults to the manager's)
            max_retries: Per-call override of the retry count

        Returns:
            Whatever ``func`` returns on the first successful attempt

        Raises:
            The last retryable exception once retries are exhausted, or any
            non-retryable exception immediately.
        """
        retryable = exceptions if exceptions is not None else self.retryable_errors
        retries = self.max_retries if max_retries is None else max_retries
        total_attempts = retries + 1

        attempt = 0
        while True:
            try:
                return await func(*args, **kwargs)
            except retryable as e:
                if attempt >= retries:
                    logger.error(f"All {total_attempts} attempts failed, giving up: {e}")
                    raise

                delay = self._calculate_delay(attempt)
                attempt += 1
                logger.warning(
                    f"Attempt {attempt} failed: {e}. "
                    f"Retrying in {delay:.1f}s ({attempt}/{retries})"
                )
                await asyncio.sleep(delay)


__all__ = ["RetryConfig", "RetryManager"]
