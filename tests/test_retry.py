"""Tests for the backoff retrier."""

from __future__ import annotations

import pytest

from linguaspark.services.errors import (
    ClassifiedError,
    ErrorContext,
    ErrorKind,
    HttpFailure,
    NetworkFailure,
    RequestFailedError,
)
from linguaspark.services.retry import RetryPolicy, compute_delay, retry_with_backoff


class _Sleeps:
    """Records requested delays without waiting."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _failing(failure, calls: list[int]):
    async def operation():
        calls.append(1)
        raise RequestFailedError(failure, endpoint="/pollinations/text")

    return operation


# ── compute_delay ────────────────────────────────────────────


def test_delay_doubles_per_attempt() -> None:
    error = ClassifiedError(ErrorKind.API, "down")
    policy = RetryPolicy(jitter=0.0)
    assert compute_delay(error, 1, policy) == 2.0
    assert compute_delay(error, 2, policy) == 4.0
    assert compute_delay(error, 3, policy) == 8.0


def test_delay_adds_jitter() -> None:
    error = ClassifiedError(ErrorKind.NETWORK, "down")
    policy = RetryPolicy(jitter=1.0)
    assert compute_delay(error, 1, policy, random_fn=lambda: 0.5) == 1.5


def test_delay_is_capped() -> None:
    error = ClassifiedError(ErrorKind.RATE_LIMIT, "slow down")
    assert compute_delay(error, 1, RetryPolicy(max_delay=30.0), random_fn=lambda: 0.0) == 30.0


def test_retry_after_hint_wins() -> None:
    error = ClassifiedError(ErrorKind.RATE_LIMIT, "slow down", retry_after=45.0)
    assert compute_delay(error, 1, RetryPolicy(max_delay=30.0)) == 45.0


# ── retry_with_backoff ───────────────────────────────────────


@pytest.mark.asyncio
async def test_returns_first_success() -> None:
    sleeps = _Sleeps()

    async def operation() -> str:
        return "ok"

    assert await retry_with_backoff(operation, sleep=sleeps) == "ok"
    assert sleeps.delays == []


@pytest.mark.asyncio
async def test_recovers_after_transient_failure() -> None:
    sleeps = _Sleeps()
    attempts: list[int] = []

    async def operation() -> str:
        attempts.append(1)
        if len(attempts) < 2:
            raise RequestFailedError(NetworkFailure("offline"))
        return "ok"

    result = await retry_with_backoff(
        operation, RetryPolicy(max_retries=3), sleep=sleeps, random_fn=lambda: 0.0
    )
    assert result == "ok"
    assert len(attempts) == 2
    assert sleeps.delays == [1.0]


@pytest.mark.asyncio
async def test_stops_at_attempt_ceiling() -> None:
    """A persistently failing retryable operation runs exactly max_retries times."""
    sleeps = _Sleeps()
    calls: list[int] = []

    with pytest.raises(ClassifiedError) as exc_info:
        await retry_with_backoff(
            _failing(HttpFailure(status=503, message="Unavailable"), calls),
            RetryPolicy(max_retries=3),
            sleep=sleeps,
            random_fn=lambda: 0.0,
        )

    assert len(calls) == 3
    assert sleeps.delays == [2.0, 4.0]
    assert exc_info.value.kind == ErrorKind.API


@pytest.mark.asyncio
async def test_non_retryable_short_circuits() -> None:
    sleeps = _Sleeps()
    calls: list[int] = []

    with pytest.raises(ClassifiedError) as exc_info:
        await retry_with_backoff(
            _failing(HttpFailure(status=401, message="Unauthorized"), calls),
            RetryPolicy(max_retries=3),
            sleep=sleeps,
        )

    assert len(calls) == 1
    assert sleeps.delays == []
    assert exc_info.value.kind == ErrorKind.AUTHENTICATION


@pytest.mark.asyncio
async def test_on_retry_sees_each_retried_error() -> None:
    seen: list[tuple[ErrorKind, int, float]] = []
    calls: list[int] = []
    context = ErrorContext(operation="generate_text")

    with pytest.raises(ClassifiedError) as exc_info:
        await retry_with_backoff(
            _failing(NetworkFailure("offline"), calls),
            RetryPolicy(max_retries=2),
            context=context,
            on_retry=lambda error, attempt, delay: seen.append((error.kind, attempt, delay)),
            sleep=_Sleeps(),
            random_fn=lambda: 0.0,
        )

    assert seen == [(ErrorKind.NETWORK, 1, 1.0)]
    assert exc_info.value.context == context


@pytest.mark.asyncio
async def test_raised_error_chains_original() -> None:
    calls: list[int] = []
    with pytest.raises(ClassifiedError) as exc_info:
        await retry_with_backoff(
            _failing(HttpFailure(status=402, message="Payment Required"), calls),
            sleep=_Sleeps(),
        )
    assert isinstance(exc_info.value.__cause__, RequestFailedError)
