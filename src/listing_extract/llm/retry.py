"""Bounded retry with exponential backoff around a single model call.

Attempts are strictly sequential.  The wait between attempts is an
``asyncio.sleep``, so only the current request is suspended while other
requests on the same event loop keep running.  Intermediate failures are
logged and swallowed; only the last one is surfaced, wrapped in
RetryExhaustedError.  There is no jitter, circuit breaker or per-attempt
timeout: a hung call never returns.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

import openai

from listing_extract.config import INITIAL_DELAY_SECONDS, MAX_ATTEMPTS

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Substrings (lower-case) that mark an otherwise-untyped error as network related
CONNECTIVITY_MARKERS = (
    "network",
    "timeout",
    "timed out",
    "connection refused",
    "connection reset",
    "connection error",
    "fetch failed",
    "econnrefused",
    "enotfound",
    "unreachable",
)


def is_connectivity_error(exc: BaseException | None) -> bool:
    """Classify *exc* as transient/network related (eligible for a retry-later suggestion)."""
    if exc is None:
        return False
    # openai.APITimeoutError subclasses APIConnectionError
    if isinstance(exc, (openai.APIConnectionError, ConnectionError, TimeoutError)):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in CONNECTIVITY_MARKERS)


class RetryExhaustedError(Exception):
    """Terminal failure: every attempt failed.  Carries the last error and its classification."""

    def __init__(self, last_error: BaseException, attempts: int):
        super().__init__(f"Operation failed after {attempts} attempt(s): {last_error}")
        self.last_error = last_error
        self.attempts = attempts
        self.is_connectivity_error = is_connectivity_error(last_error)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry an async operation up to *max_attempts* times.

    The wait after failed attempt ``n`` (0-based) is ``initial_delay * 2**n``
    seconds; there is no wait after the final attempt.  *sleep* is injectable
    so tests do not have to wait.
    """

    max_attempts: int = MAX_ATTEMPTS
    initial_delay: float = INITIAL_DELAY_SECONDS
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.initial_delay < 0:
            raise ValueError(f"initial_delay must be non-negative, got {self.initial_delay}")

    def delay_for(self, attempt: int) -> float:
        """Backoff in seconds after the failed 0-based *attempt*."""
        return self.initial_delay * 2**attempt

    async def invoke(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Await ``operation()`` until it succeeds or attempts run out (then raise RetryExhaustedError)."""
        last_error: BaseException | None = None
        for attempt in range(self.max_attempts):
            try:
                return await operation()
            except Exception as exc:  # pylint: disable=broad-exception-caught
                last_error = exc
                if attempt + 1 >= self.max_attempts:
                    break
                delay = self.delay_for(attempt)
                logger.warning(
                    "Attempt %d/%d failed (%s); retrying in %.1fs",
                    attempt + 1,
                    self.max_attempts,
                    exc,
                    delay,
                )
                await self.sleep(delay)

        logger.error("All %d attempt(s) failed; last error: %s", self.max_attempts, last_error)
        raise RetryExhaustedError(last_error, self.max_attempts) from last_error
