"""
Service layer infrastructure - resilience patterns for content API calls.

Provides:
- classify: Maps raw failures onto the error taxonomy
- retry_with_backoff: Retries retryable failures with exponential backoff
- RequestCache: Content-addressed cache with TTL and bounded size
- RequestDeduplicator: Prevents duplicate concurrent requests
- ApiClient: Envelope-aware HTTP client
- CacheMaintenanceScheduler: Periodic cache cleanup
"""

from linguaspark.services.errors import (
    ClassifiedError,
    ErrorContext,
    ErrorKind,
    Failure,
    GenericFailure,
    HttpFailure,
    NetworkFailure,
    RequestFailedError,
    ServiceError,
)
from linguaspark.services.classifier import classify
from linguaspark.services.retry import (
    CONTENT_RETRY_POLICY,
    IMAGE_RETRY_POLICY,
    RetryPolicy,
    compute_delay,
    retry_with_backoff,
)
from linguaspark.services.cache import CacheEntry, CacheResult, RequestCache, build_cache_key
from linguaspark.services.deduplicator import RequestDeduplicator
from linguaspark.services.client import ApiClient
from linguaspark.services.maintenance import CacheMaintenanceScheduler

__all__ = [
    # Errors
    "ServiceError",
    "RequestFailedError",
    "ClassifiedError",
    "ErrorContext",
    "ErrorKind",
    "Failure",
    "HttpFailure",
    "NetworkFailure",
    "GenericFailure",
    # Classification and retry
    "classify",
    "RetryPolicy",
    "CONTENT_RETRY_POLICY",
    "IMAGE_RETRY_POLICY",
    "compute_delay",
    "retry_with_backoff",
    # Cache
    "RequestCache",
    "CacheEntry",
    "CacheResult",
    "build_cache_key",
    "CacheMaintenanceScheduler",
    # Deduplicator
    "RequestDeduplicator",
    # Client
    "ApiClient",
]
