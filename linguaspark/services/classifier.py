"""
Error classifier - maps a raw failure onto the error taxonomy.

Rules are checked in priority order and the first match wins:

1. name/message mentions a timeout            -> TIMEOUT
2. status 401 or "authentication"             -> AUTHENTICATION
3. status 402 or "quota" / "balance"          -> QUOTA_EXCEEDED
4. status 429 or "rate limit"                 -> RATE_LIMIT
5. "validation"                               -> VALIDATION
6. "quality"                                  -> QUALITY
7. status >= 500 or "server"                  -> API
8. no connectivity or "network"               -> NETWORK
9. anything else                              -> UNKNOWN

A 5xx whose message also says "network" is API, not NETWORK: the order
above is the precedence.
"""

import httpx

from linguaspark.services.errors import (
    ClassifiedError,
    ErrorContext,
    ErrorKind,
    Failure,
    GenericFailure,
    HttpFailure,
    NetworkFailure,
    RequestFailedError,
)


def to_failure(raw: object) -> Failure:
    """Describe an arbitrary raised object as a typed ``Failure``."""
    if isinstance(raw, (HttpFailure, NetworkFailure, GenericFailure)):
        return raw
    if isinstance(raw, RequestFailedError):
        return raw.failure
    if isinstance(raw, httpx.HTTPStatusError):
        return HttpFailure(
            status=raw.response.status_code,
            message=raw.response.text[:200] or str(raw),
        )
    if isinstance(raw, httpx.TimeoutException):
        return GenericFailure(message=str(raw), name=type(raw).__name__)
    if isinstance(raw, (httpx.NetworkError, ConnectionError)):
        return NetworkFailure(message=str(raw))
    if isinstance(raw, BaseException):
        return GenericFailure(message=str(raw), name=type(raw).__name__)
    return GenericFailure(message=str(raw) if raw is not None else "")


def classify_failure(failure: Failure) -> ErrorKind:
    """Pick the error kind for a typed failure."""
    status = failure.status if isinstance(failure, HttpFailure) else None
    message = failure.message.lower()
    name = failure.name.lower() if isinstance(failure, GenericFailure) else ""

    if "timeout" in name or "timeout" in message or "timed out" in message:
        return ErrorKind.TIMEOUT
    if status == 401 or "authentication" in message:
        return ErrorKind.AUTHENTICATION
    if status == 402 or "quota" in message or "balance" in message:
        return ErrorKind.QUOTA_EXCEEDED
    if status == 429 or "rate limit" in message:
        return ErrorKind.RATE_LIMIT
    if "validation" in message:
        return ErrorKind.VALIDATION
    if "quality" in message:
        return ErrorKind.QUALITY
    if (status is not None and status >= 500) or "server" in message:
        return ErrorKind.API
    if isinstance(failure, NetworkFailure) or "network" in message:
        return ErrorKind.NETWORK
    return ErrorKind.UNKNOWN


def classify(raw: object, context: ErrorContext | None = None) -> ClassifiedError:
    """
    Classify a raw failure.

    Already-classified errors pass through; they pick up ``context`` only
    when they were classified without one.
    """
    if isinstance(raw, ClassifiedError):
        if context is not None and raw.context == ErrorContext():
            return raw.with_context(context)
        return raw

    failure = to_failure(raw)
    if context is None and isinstance(raw, RequestFailedError) and raw.endpoint:
        context = ErrorContext(endpoint=raw.endpoint)

    return ClassifiedError(
        kind=classify_failure(failure),
        raw_message=failure.message,
        context=context,
        retry_after=failure.retry_after if isinstance(failure, HttpFailure) else None,
        status_code=failure.status if isinstance(failure, HttpFailure) else None,
    )
