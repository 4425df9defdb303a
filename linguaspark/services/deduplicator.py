"""
RequestDeduplicator - single-flight execution of identical content requests.

Two screens asking for the same lesson text at once should cost one backend
call. The first caller for a key starts the work; everyone arriving while it
is pending awaits the same task and sees the same value or the same error.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, TypeVar

from loguru import logger

T = TypeVar("T")


class RequestDeduplicator:
    """
    Map of request key -> pending task.

    Usage:
        dedup = RequestDeduplicator()
        content = await dedup.dedupe(cache_key, lambda: fetch_content(options))

    Lookup and registration happen with no ``await`` in between, so on a
    single event loop two callers can never both start the work. Callers are
    shielded from each other: cancelling one waiter leaves the shared task
    running for the rest.
    """

    def __init__(self, debug: bool = False):
        self._pending: dict[str, asyncio.Future[Any]] = {}
        self._debug = debug
        self._stats = DeduplicatorStats()

    async def dedupe(
        self,
        key: str,
        request_fn: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Run ``request_fn`` unless a request for ``key`` is already pending.

        Raises:
            Whatever the shared request raised, to every caller
        """
        shared = self._pending.get(key)
        if shared is None:
            shared = asyncio.ensure_future(request_fn())
            self._pending[key] = shared
            shared.add_done_callback(lambda done: self._settle(key, done))
            self._stats.started += 1
            self._log(f"START {key[:50]}")
        else:
            self._stats.joined += 1
            self._log(f"JOIN {key[:50]}")

        return await asyncio.shield(shared)

    def _settle(self, key: str, done: "asyncio.Future[Any]") -> None:
        if self._pending.get(key) is done:
            del self._pending[key]
        if done.cancelled():
            self._stats.cancelled += 1
            return
        if done.exception() is not None:
            self._stats.failed += 1
        self._log(f"SETTLED {key[:50]}")

    def is_pending(self, key: str) -> bool:
        return key in self._pending

    def cancel(self, key: str) -> bool:
        shared = self._pending.pop(key, None)
        if shared is None:
            return False
        shared.cancel()
        return True

    def cancel_all(self) -> int:
        """Cancel every pending request; used on shutdown."""
        pending = list(self._pending.values())
        self._pending.clear()
        for shared in pending:
            shared.cancel()
        if pending:
            self._log(f"Cancelled {len(pending)} pending requests")
        return len(pending)

    def get_in_flight_count(self) -> int:
        return len(self._pending)

    def get_in_flight_keys(self) -> list[str]:
        return list(self._pending)

    def get_stats(self) -> "DeduplicatorStats":
        self._stats.in_flight = len(self._pending)
        return self._stats

    def _log(self, message: str) -> None:
        if self._debug:
            logger.debug(f"[RequestDeduplicator] {message}")


@dataclass
class DeduplicatorStats:
    started: int = 0  # requests actually sent
    joined: int = 0  # callers that reused a pending request
    failed: int = 0
    cancelled: int = 0
    in_flight: int = 0

    @property
    def dedup_rate(self) -> float:
        """Share of callers served by someone else's request."""
        callers = self.started + self.joined
        if callers == 0:
            return 0.0
        return self.joined / callers

    def to_dict(self) -> dict[str, Any]:
        return {
            "started": self.started,
            "joined": self.joined,
            "failed": self.failed,
            "cancelled": self.cancelled,
            "in_flight": self.in_flight,
            "dedup_rate": f"{self.dedup_rate:.2%}",
        }
