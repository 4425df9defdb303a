"""Tests for error classification."""

from __future__ import annotations

import httpx
import pytest

from linguaspark.services.classifier import classify, classify_failure, to_failure
from linguaspark.services.errors import (
    ERROR_TEMPLATES,
    ClassifiedError,
    ErrorContext,
    ErrorKind,
    GenericFailure,
    HttpFailure,
    NetworkFailure,
    RequestFailedError,
)


# ── rules ────────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("failure", "expected"),
    [
        (GenericFailure(message="boom", name="TimeoutError"), ErrorKind.TIMEOUT),
        (GenericFailure(message="Request timed out"), ErrorKind.TIMEOUT),
        (HttpFailure(status=401, message="Unauthorized"), ErrorKind.AUTHENTICATION),
        (GenericFailure(message="Authentication required"), ErrorKind.AUTHENTICATION),
        (HttpFailure(status=402, message="Payment Required"), ErrorKind.QUOTA_EXCEEDED),
        (GenericFailure(message="Insufficient balance"), ErrorKind.QUOTA_EXCEEDED),
        (HttpFailure(status=429, message="Too Many Requests"), ErrorKind.RATE_LIMIT),
        (GenericFailure(message="Rate limit hit"), ErrorKind.RATE_LIMIT),
        (GenericFailure(message="Validation failed for rounds"), ErrorKind.VALIDATION),
        (GenericFailure(message="Low quality output"), ErrorKind.QUALITY),
        (HttpFailure(status=503, message="Unavailable"), ErrorKind.API),
        (GenericFailure(message="internal server hiccup"), ErrorKind.API),
        (NetworkFailure(message="offline"), ErrorKind.NETWORK),
        (GenericFailure(message="Network is unreachable"), ErrorKind.NETWORK),
        (GenericFailure(message="something odd"), ErrorKind.UNKNOWN),
        (HttpFailure(status=404, message="Not Found"), ErrorKind.UNKNOWN),
    ],
)
def test_classify_failure(failure, expected: ErrorKind) -> None:
    assert classify_failure(failure) == expected


def test_timeout_beats_authentication() -> None:
    """Precedence: a 401 whose message mentions timeout is TIMEOUT."""
    failure = HttpFailure(status=401, message="Session timeout")
    assert classify_failure(failure) == ErrorKind.TIMEOUT


def test_server_status_beats_network_message() -> None:
    """A 5xx mentioning the network is still an API error."""
    failure = HttpFailure(status=502, message="upstream network failure")
    assert classify_failure(failure) == ErrorKind.API


def test_quota_beats_rate_limit() -> None:
    failure = HttpFailure(status=429, message="quota exhausted")
    assert classify_failure(failure) == ErrorKind.QUOTA_EXCEEDED


def test_every_kind_has_a_template() -> None:
    assert set(ERROR_TEMPLATES) == set(ErrorKind)


# ── to_failure ───────────────────────────────────────────────


def test_request_failed_error_unwraps_failure() -> None:
    failure = HttpFailure(status=500, message="boom")
    assert to_failure(RequestFailedError(failure, endpoint="/x")) is failure


def test_httpx_timeout_becomes_generic_failure() -> None:
    failure = to_failure(httpx.ReadTimeout("read"))
    assert isinstance(failure, GenericFailure)
    assert failure.name == "ReadTimeout"


def test_httpx_connect_error_becomes_network_failure() -> None:
    assert isinstance(to_failure(httpx.ConnectError("refused")), NetworkFailure)


def test_non_exception_input_is_total() -> None:
    error = classify(None)
    assert error.kind == ErrorKind.UNKNOWN


# ── classify ─────────────────────────────────────────────────


def test_classify_carries_retry_after_and_status() -> None:
    error = classify(HttpFailure(status=429, message="slow down", retry_after=12.0))
    assert error.kind == ErrorKind.RATE_LIMIT
    assert error.retry_after == 12.0
    assert error.status_code == 429
    assert error.retryable is True


def test_classify_takes_endpoint_from_request_error() -> None:
    error = classify(RequestFailedError(NetworkFailure("down"), endpoint="/pollinations/text"))
    assert error.context.endpoint == "/pollinations/text"


def test_auth_and_quota_are_not_retryable() -> None:
    assert classify(HttpFailure(status=401)).retryable is False
    assert classify(HttpFailure(status=402)).retryable is False


def test_classified_error_passes_through() -> None:
    original = ClassifiedError(ErrorKind.QUALITY, "meh")
    assert classify(original) is original


def test_classified_error_picks_up_missing_context() -> None:
    original = ClassifiedError(ErrorKind.QUALITY, "meh")
    context = ErrorContext(operation="generate_text")
    result = classify(original, context)
    assert result.kind == ErrorKind.QUALITY
    assert result.context == context


def test_classified_error_keeps_existing_context() -> None:
    context = ErrorContext(operation="generate_image")
    original = ClassifiedError(ErrorKind.API, "down", context=context)
    result = classify(original, ErrorContext(operation="other"))
    assert result is original


# ── messaging ────────────────────────────────────────────────


def test_user_friendly_message_adds_wait_hint() -> None:
    error = ClassifiedError(ErrorKind.RATE_LIMIT, "slow", retry_after=90)
    assert "Please wait 2 minutes" in error.user_friendly_message()


def test_image_timeout_suggests_text_game() -> None:
    error = ClassifiedError(
        ErrorKind.TIMEOUT,
        "timed out",
        context=ErrorContext(game_type="image-instinct"),
    )
    assert "text-based game" in error.contextual_suggestions()[0]
    assert error.recovery_actions["immediate"][0] == "Try a text-based game instead"


def test_to_dict_is_flat() -> None:
    error = classify(HttpFailure(status=500, message="boom"), ErrorContext(operation="op"))
    data = error.to_dict()
    assert data["kind"] == "API"
    assert data["operation"] == "op"
    assert data["severity"] == "high"
