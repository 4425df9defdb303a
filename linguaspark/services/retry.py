"""
Backoff retrier - retries an async operation on retryable errors.

States:
- ATTEMPTING: the operation is running
- WAITING: a retryable failure occurred and attempts remain
- DONE: the operation succeeded
- FAILED: the error is not retryable or attempts are exhausted

Delay before attempt n+1 is the server's retry-after hint when present,
otherwise ``base_delay(kind) * 2**(n-1) + uniform(0, jitter)`` capped at
``max_delay``.
"""

import asyncio
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from loguru import logger

from linguaspark.services.classifier import classify
from linguaspark.services.errors import ERROR_TEMPLATES, ClassifiedError, ErrorContext

T = TypeVar("T")

RetryCallback = Callable[[ClassifiedError, int, float], None]


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry with backoff."""

    max_retries: int = 3  # Total attempts, including the first
    max_delay: float = 30.0  # seconds
    jitter: float = 1.0  # seconds


CONTENT_RETRY_POLICY = RetryPolicy(max_retries=3)
IMAGE_RETRY_POLICY = RetryPolicy(max_retries=2)


def compute_delay(
    error: ClassifiedError,
    attempt: int,
    policy: RetryPolicy,
    random_fn: Callable[[], float] = random.random,
) -> float:
    """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
    if error.retry_after is not None:
        return max(0.0, error.retry_after)

    base_delay = ERROR_TEMPLATES[error.kind].base_delay
    delay = base_delay * 2 ** (attempt - 1) + random_fn() * policy.jitter
    return min(delay, policy.max_delay)


async def retry_with_backoff(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    context: ErrorContext | None = None,
    on_retry: RetryCallback | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    random_fn: Callable[[], float] = random.random,
) -> T:
    """
    Run ``operation`` until it succeeds or retrying stops making sense.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        policy: Retry ceiling and delay cap (defaults to content policy)
        context: Attached to every classified error
        on_retry: Called with (error, attempt, delay) before each wait
        sleep: Awaitable delay function
        random_fn: Jitter source returning a float in [0, 1)

    Raises:
        ClassifiedError: The first non-retryable error, or the last error
            once attempts are exhausted
    """
    policy = policy or CONTENT_RETRY_POLICY
    max_attempts = max(1, policy.max_retries)
    attempt = 1

    while True:
        try:
            return await operation()
        except Exception as e:
            error = classify(e, context)

            if not error.retryable or attempt >= max_attempts:
                if error.retryable:
                    logger.error(
                        f"Giving up after {attempt} attempts: "
                        f"{error.kind.value}: {error.raw_message}"
                    )
                else:
                    logger.warning(
                        f"Attempt {attempt} failed with non-retryable "
                        f"{error.kind.value}: {error.raw_message}"
                    )
                if error is e:
                    raise
                raise error from e

            delay = compute_delay(error, attempt, policy, random_fn)
            logger.warning(
                f"Attempt {attempt}/{max_attempts} failed ({error.kind.value}), "
                f"retrying in {delay:.2f}s"
            )
            if on_retry is not None:
                on_retry(error, attempt, delay)

            await sleep(delay)
            attempt += 1
