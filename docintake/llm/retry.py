"""Async retry with exponential backoff for transient provider failures."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from docintake.logging.logger import Log

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy.

    Attributes:
        max_attempts: Maximum number of attempts, including the first one.
        initial_delay_seconds: Delay before the first retry.
        max_delay_seconds: Upper bound for any single delay.
        backoff_multiplier: Factor applied to the delay after each failure.
    """

    max_attempts: int = 3
    initial_delay_seconds: float = 1.0
    max_delay_seconds: float = 10.0
    backoff_multiplier: float = 2.0


async def retry_async(
    func: Callable[[], Awaitable[T]],
    config: RetryConfig,
    retryable: tuple[type[Exception], ...],
) -> T:
    """Await *func* until it succeeds or attempts run out.

    Only exceptions listed in *retryable* trigger another attempt; the last
    one is re-raised unchanged.
    """
    attempts = max(1, config.max_attempts)
    delay = config.initial_delay_seconds
    for attempt in range(1, attempts + 1):
        try:
            return await func()
        except retryable as exc:
            if attempt == attempts:
                Log.error(f"All {attempts} attempts failed: {exc}")
                raise
            Log.warning(
                f"Attempt {attempt}/{attempts} failed: {type(exc).__name__}: {exc}. "
                f"Retrying in {delay:.2f}s"
            )
            await asyncio.sleep(delay)
            delay = min(delay * config.backoff_multiplier, config.max_delay_seconds)
    raise AssertionError("unreachable")
