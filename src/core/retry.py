"""Exponential backoff for provider calls."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

from fare_logging import log_context

from .exceptions import TransientError

if TYPE_CHECKING:
    from settings import EstimatorSettings

T = TypeVar("T")
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryConfig:
    """Backoff policy. ``max_attempts`` counts the first call."""

    max_attempts: int = 3
    base_delay: float = 0.5
    multiplier: float = 2.0
    max_delay: float = 10.0
    retryable_exceptions: tuple[type[Exception], ...] = field(
        default_factory=lambda: (TransientError,)
    )

    @classmethod
    def for_directions(cls, settings: EstimatorSettings) -> RetryConfig:
        return cls(
            max_attempts=settings.directions_max_retries + 1,
            base_delay=settings.directions_retry_base_delay,
            multiplier=settings.directions_retry_multiplier,
        )

    def delay_for(self, retry: int) -> float:
        """Sleep before the ``retry``-th retry (0-based), capped at ``max_delay``."""
        return min(self.base_delay * self.multiplier**retry, self.max_delay)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    provider: str = "provider",
) -> T:
    """Await ``operation``, retrying transient failures with backoff.

    Anything outside ``config.retryable_exceptions`` propagates on the first
    failure. The last transient error propagates once attempts run out.
    """
    config = config or RetryConfig()

    retries = 0
    while True:
        try:
            return await operation()
        except config.retryable_exceptions as e:
            if retries + 1 >= config.max_attempts:
                logger.error(f"{provider} failed after {retries + 1} attempts: {e}")
                raise

            delay = config.delay_for(retries)
            retries += 1
            with log_context(provider=provider):
                logger.warning(
                    f"{provider} attempt {retries}/{config.max_attempts} failed, "
                    f"retrying in {delay:.2f}s: {e}"
                )
            await asyncio.sleep(delay)
