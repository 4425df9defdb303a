"""
Composition root - builds one instance of every service from Settings.

Nothing in the package holds module-level service singletons; the
container owns the instances and their lifecycle.
"""

import asyncio
from dataclasses import dataclass
from datetime import timedelta
from typing import Awaitable, Callable

import httpx
from loguru import logger

from linguaspark.content.fallback import FallbackContentProvider
from linguaspark.content.optimizer import RequestOptimizer
from linguaspark.content.pollinations import PollinationsService
from linguaspark.monitoring.error_monitor import ErrorMonitor
from linguaspark.services.cache import RequestCache
from linguaspark.services.client import ApiClient
from linguaspark.services.deduplicator import RequestDeduplicator
from linguaspark.services.maintenance import CacheMaintenanceScheduler
from linguaspark.services.retry import RetryPolicy
from linguaspark.settings import Settings, load_settings


@dataclass
class ServiceContainer:
    settings: Settings
    client: ApiClient
    cache: RequestCache
    deduplicator: RequestDeduplicator
    monitor: ErrorMonitor
    fallback: FallbackContentProvider
    optimizer: RequestOptimizer | None
    maintenance: CacheMaintenanceScheduler
    pollinations: PollinationsService

    def start(self) -> None:
        """Start background maintenance; needs a running event loop."""
        self.maintenance.start()

    async def close(self) -> None:
        if self.maintenance.is_running():
            self.maintenance.stop()

        cancelled = self.deduplicator.cancel_all()
        if cancelled:
            logger.info(f"Cancelled {cancelled} in-flight requests")

        await self.client.close()

    async def __aenter__(self) -> "ServiceContainer":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def create_container(
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> ServiceContainer:
    """
    Wire the services together.

    Args:
        settings: Configuration (loaded from the environment when omitted)
        transport: Optional httpx transport, e.g. ``httpx.MockTransport``
        sleep: Delay function used between retries
    """
    settings = settings or load_settings()

    monitor = ErrorMonitor(max_entries=settings.error_log_size)
    client = ApiClient(
        settings.api_base_url,
        token=settings.api_token,
        timeout=settings.request_timeout,
        transport=transport,
        on_request=monitor.record_request,
    )
    cache = RequestCache(
        max_size=settings.cache_max_size,
        default_ttl=timedelta(seconds=settings.text_cache_ttl),
        debug=settings.debug,
    )
    deduplicator = RequestDeduplicator(debug=settings.debug)
    fallback = FallbackContentProvider()
    optimizer = RequestOptimizer(debug=settings.debug) if settings.optimize_requests else None

    pollinations = PollinationsService(
        client,
        cache,
        deduplicator,
        monitor,
        fallback,
        optimizer,
        content_policy=RetryPolicy(
            max_retries=settings.content_max_retries,
            max_delay=settings.max_retry_delay,
        ),
        image_policy=RetryPolicy(
            max_retries=settings.image_max_retries,
            max_delay=settings.max_retry_delay,
        ),
        text_ttl=timedelta(seconds=settings.text_cache_ttl),
        image_ttl=timedelta(seconds=settings.image_cache_ttl),
        game_content_ttl=timedelta(seconds=settings.game_content_cache_ttl),
        sleep=sleep,
    )

    return ServiceContainer(
        settings=settings,
        client=client,
        cache=cache,
        deduplicator=deduplicator,
        monitor=monitor,
        fallback=fallback,
        optimizer=optimizer,
        maintenance=CacheMaintenanceScheduler(
            cache, interval_minutes=settings.cache_cleanup_interval_minutes
        ),
        pollinations=pollinations,
    )
