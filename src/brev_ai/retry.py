"""Bounded retry with exponential backoff and sine jitter."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, TypeVar

from brev_ai.errors import ChatClientError, RetriesExhaustedError, is_retryable

_logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class RetryPolicy:
    """Retry configuration for one client.

    ``max_retries`` counts extra attempts: the default of 3 allows 4 in
    total.  ``clock_ns`` feeds the jitter term and ``sleep`` performs the
    backoff wait.
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    clock_ns: Callable[[], int] = field(default=time.time_ns, repr=False)
    sleep: Callable[[float], Awaitable[None]] = field(
        default=asyncio.sleep, repr=False,
    )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def base_backoff(self, attempt: int) -> float:
        """Un-jittered delay for 0-indexed *attempt*."""
        return min(self.max_delay, self.base_delay * (2 ** attempt))

    def backoff_delay(self, attempt: int) -> float:
        delay = self.base_backoff(attempt)
        delay += delay * 0.5 * math.sin(self.clock_ns())
        return max(0.0, min(delay, self.max_delay))

    async def run(self, operation: Callable[[int], Awaitable[T]]) -> T:
        """Call ``operation(attempt)`` until it succeeds.

        Non-retryable errors propagate immediately.  When every attempt
        fails with a retryable error, ``RetriesExhaustedError`` is raised.
        """
        last_error: ChatClientError | None = None

        for attempt in range(self.max_attempts):
            try:
                result = await operation(attempt)
            except ChatClientError as e:
                last_error = e
                if not is_retryable(e):
                    raise
                if attempt == self.max_retries:
                    break
                delay = self.backoff_delay(attempt)
                _logger.warning(
                    "Attempt %d/%d failed: %s; retrying in %.2fs",
                    attempt + 1, self.max_attempts, e, delay,
                )
                await self.sleep(delay)
                continue

            if attempt > 0:
                _logger.info("Request succeeded on attempt %d", attempt + 1)
            return result

        raise RetriesExhaustedError(self.max_attempts, last_error) from last_error
