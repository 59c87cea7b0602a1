"""Reusable retry policy for calls to external services."""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional, TypeVar

from drive_api.config import UPLOAD_MAX_ATTEMPTS, UPLOAD_RETRY_BASE_DELAY_SECONDS
from drive_api.exceptions import ObjectStoreUnavailableError
from drive_common.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def linear_backoff(base_delay: float, attempt: int) -> float:
    """
    Delay before retrying after the given (1-based) failed attempt.
    """
    return base_delay * attempt


def is_transient_store_error(exc: BaseException) -> bool:
    return isinstance(exc, ObjectStoreUnavailableError)


class RetryExhaustedError(Exception):
    """
    Raised when every attempt failed; wraps the last error.
    """

    def __init__(self, attempts: int, last_error: BaseException):
        super().__init__(str(last_error))
        self.attempts = attempts
        self.last_error = last_error


@dataclass
class RetryPolicy:
    """
    Bounded retries with a pluggable backoff and retryable-error predicate.

    Errors the predicate rejects are re-raised immediately; retryable errors
    are retried until max_attempts is reached, then wrapped in
    RetryExhaustedError.
    """
    max_attempts: int = UPLOAD_MAX_ATTEMPTS
    base_delay: float = UPLOAD_RETRY_BASE_DELAY_SECONDS
    backoff: Callable[[float, int], float] = linear_backoff
    retryable: Callable[[BaseException], bool] = is_transient_store_error
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        description: str = "operation",
        on_attempt: Optional[Callable[[int], None]] = None,
    ) -> T:
        """
        Run an async operation under this policy.

        Args:
            operation: Zero-argument coroutine factory, called once per attempt
            description: Label used in log messages
            on_attempt: Optional callback receiving the 1-based attempt number

        Returns:
            The operation's result

        Raises:
            RetryExhaustedError: If every attempt failed with a retryable error
            Exception: Any non-retryable error, unchanged
        """
        for attempt in range(1, self.max_attempts + 1):
            if on_attempt is not None:
                on_attempt(attempt)
            try:
                return await operation()
            except Exception as e:
                if not self.retryable(e):
                    raise
                if attempt >= self.max_attempts:
                    logger.error(f"{description} failed after {attempt} attempts: {e}")
                    raise RetryExhaustedError(attempt, e) from e

                delay = self.backoff(self.base_delay, attempt)
                logger.warning(
                    f"{description} failed (attempt {attempt}/{self.max_attempts}), "
                    f"retrying in {delay:.2f}s: {e}"
                )
                await self.sleep(delay)

        raise AssertionError("unreachable")
