"""
Backoff for plan provider calls.

Part of HYG-22: OpenAI plan provider

Only transient failures are retried: rate limits, 5xx answers, timeouts and
dropped connections. A malformed answer or a rejected key fails on the
first attempt so the session can fall back without waiting.
"""
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

import openai
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3

TRANSIENT_ERRORS = (
    openai.RateLimitError,
    openai.APITimeoutError,
    openai.APIConnectionError,
    openai.InternalServerError,
    TimeoutError,
    ConnectionError,
)

PERMANENT_ERRORS = (
    openai.AuthenticationError,
    openai.BadRequestError,
    openai.PermissionDeniedError,
)

TRANSIENT_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})

# Lowercase fragments of error messages raised outside the SDK
_TRANSIENT_MARKERS = (
    "rate limit",
    "429",
    "500",
    "502",
    "503",
    "504",
    "timeout",
    "timed out",
    "name resolution",
)


def is_transient_error(exception: BaseException) -> bool:
    """True if a new attempt has a chance of succeeding."""
    if isinstance(exception, PERMANENT_ERRORS):
        return False
    if isinstance(exception, TRANSIENT_ERRORS):
        return True
    if isinstance(exception, openai.APIStatusError):
        return exception.status_code in TRANSIENT_STATUS_CODES

    message = str(exception).lower()
    return any(marker in message for marker in _TRANSIENT_MARKERS)


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attempt budget and exponential backoff bounds.

    Raises:
        ValueError: On a non-positive budget or wait, or min_wait > max_wait
    """

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    min_wait_seconds: float = 1.0
    max_wait_seconds: float = 10.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.min_wait_seconds <= 0 or self.max_wait_seconds <= 0:
            raise ValueError("Backoff waits must be positive")
        if self.min_wait_seconds > self.max_wait_seconds:
            raise ValueError(
                f"min_wait_seconds ({self.min_wait_seconds}) exceeds "
                f"max_wait_seconds ({self.max_wait_seconds})"
            )

    def retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            retry=retry_if_exception(is_transient_error),
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(
                multiplier=self.min_wait_seconds,
                min=self.min_wait_seconds,
                max=self.max_wait_seconds,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )


async def call_with_retry(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    policy: RetryPolicy = RetryPolicy(),
    **kwargs: Any,
) -> T:
    """
    Await `func(*args, **kwargs)`, retrying transient errors.

    Raises:
        Exception: The first permanent error, or the last transient one once
            the attempt budget is spent
    """
    return await policy.retrying()(func, *args, **kwargs)
