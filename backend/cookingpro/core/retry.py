"""
Retry policy with exponential backoff for fallible async operations.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from cookingpro.core.config import Settings
from cookingpro.core.exceptions import TransientModelError
from cookingpro.core.logging import get_logger

logger = get_logger("core.retry")

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retries: wait base_delay * multiplier ** attempt between attempts.

    With the defaults (3 attempts, 1s, x2) the waits are 1s then 2s. Only
    exceptions listed in retry_on are retried; anything else propagates at
    once. When attempts run out the last error is re-raised unchanged.
    Cancelling the awaiting task interrupts a pending wait.
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    multiplier: float = 2.0
    retry_on: Tuple[Type[BaseException], ...] = (TransientModelError,)
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, compare=False, repr=False)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def from_settings(cls, settings: Settings, **overrides) -> "RetryPolicy":
        values = dict(
            max_attempts=settings.llm_max_attempts,
            base_delay=settings.llm_retry_base_delay,
            multiplier=settings.llm_retry_multiplier,
        )
        values.update(overrides)
        return cls(**values)

    def delay_for(self, attempt: int) -> float:
        """Wait after the given zero-based failed attempt."""
        return self.base_delay * (self.multiplier ** attempt)

    async def run(self, operation: Callable[[], Awaitable[T]], description: str = "operation") -> T:
        for attempt in range(self.max_attempts):
            try:
                return await operation()
            except self.retry_on as e:
                if attempt == self.max_attempts - 1:
                    logger.error(f"{description} failed after {self.max_attempts} attempts: {e}")
                    raise
                delay = self.delay_for(attempt)
                logger.warning(
                    f"{description} attempt {attempt + 1}/{self.max_attempts} failed: {e}; "
                    f"retrying in {delay:.1f}s"
                )
                await self.sleep(delay)
        raise AssertionError("unreachable")
