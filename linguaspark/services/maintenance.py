"""
CacheMaintenanceScheduler - periodic removal of expired cache entries.

Lookups already drop expired entries lazily; this job reclaims entries that
are never looked up again.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from linguaspark.services.cache import RequestCache


class CacheMaintenanceScheduler:
    """Runs ``RequestCache.cleanup_expired`` on an interval."""

    def __init__(self, cache: RequestCache, interval_minutes: int = 5):
        self.scheduler = AsyncIOScheduler()
        self._cache = cache
        self._interval_minutes = interval_minutes
        self._is_running = False

    async def cleanup_job(self) -> None:
        """Scheduled cleanup."""
        try:
            removed = self._cache.cleanup_expired()
            if removed:
                logger.info(f"Cache cleanup removed {removed} expired entries")
        except Exception as e:
            logger.error(f"Error in scheduled cache cleanup: {e}")

    def start(self) -> None:
        """Start the scheduler; needs a running event loop."""
        if self._is_running:
            logger.warning("Cache maintenance scheduler is already running")
            return

        self.scheduler.add_job(
            self.cleanup_job,
            trigger="interval",
            minutes=self._interval_minutes,
            id="cache_cleanup_job",
            name="Request Cache Cleanup",
            replace_existing=True,
        )
        self.scheduler.start()
        self._is_running = True

        logger.info(
            f"Cache maintenance started: cleaning every {self._interval_minutes} minutes"
        )

    def stop(self) -> None:
        if not self._is_running:
            logger.warning("Cache maintenance scheduler is not running")
            return

        self.scheduler.shutdown(wait=False)
        self._is_running = False
        logger.info("Cache maintenance scheduler stopped")

    def is_running(self) -> bool:
        return self._is_running

    def run_now(self) -> int:
        """Run one cleanup immediately and return the number of entries removed."""
        removed = self._cache.cleanup_expired()
        logger.info(f"Manual cache cleanup removed {removed} expired entries")
        return removed
