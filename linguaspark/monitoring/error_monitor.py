"""
ErrorMonitor - bounded in-memory log of classified errors.

Records every classified failure together with how it was finally handled
(retried, replaced by fallback content, or surfaced to the caller) and
derives metrics and hourly trends from the log. The monitor only observes:
nothing it does changes the outcome of a request.
"""

import csv
import io
import json
import uuid
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Literal

from loguru import logger

from linguaspark.services.errors import ClassifiedError, ErrorKind

Resolution = Literal["retried", "fallback", "surfaced"]

RESOLUTIONS: tuple[str, ...] = ("retried", "fallback", "surfaced")

# loguru level per severity
_LOG_LEVELS: dict[str, str] = {
    "critical": "CRITICAL",
    "high": "ERROR",
    "medium": "WARNING",
    "low": "INFO",
}

_CSV_COLUMNS = (
    "id",
    "timestamp",
    "kind",
    "severity",
    "operation",
    "endpoint",
    "game_type",
    "status_code",
    "resolution",
    "resolved_at",
    "message",
)


@dataclass
class ErrorLogRecord:
    id: str
    error: ClassifiedError
    timestamp: datetime
    resolution: Resolution | None = None
    resolved_at: datetime | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def resolved(self) -> bool:
        return self.resolution is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "resolution": self.resolution,
            "resolved_at": self.resolved_at.isoformat() if self.resolved_at else None,
            "error": self.error.to_dict(),
            "meta": dict(self.meta),
        }


@dataclass
class ErrorMetrics:
    total_errors: int
    errors_by_kind: dict[str, int]
    errors_by_resolution: dict[str, int]
    errors_by_operation: dict[str, int]
    request_count: int
    unresolved: int

    @property
    def error_rate(self) -> float:
        """Errors per outgoing request, 0.0 when nothing was sent."""
        if self.request_count == 0:
            return 0.0
        return self.total_errors / self.request_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_errors": self.total_errors,
            "errors_by_kind": dict(self.errors_by_kind),
            "errors_by_resolution": dict(self.errors_by_resolution),
            "errors_by_operation": dict(self.errors_by_operation),
            "request_count": self.request_count,
            "error_rate": round(self.error_rate, 4),
            "unresolved": self.unresolved,
        }


class ErrorMonitor:
    """
    Ring buffer of error records.

    Once ``max_entries`` records are held, logging a new error drops the
    oldest one. The request counter is independent of the buffer, so the
    error rate reflects only the errors still retained.

    Usage:
        monitor = ErrorMonitor(max_entries=1000)
        error_id = monitor.log_error(error, {"attempt": 1})
        monitor.resolve_error(error_id, "retried")
    """

    def __init__(
        self,
        max_entries: int = 1000,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._clock = clock
        self._records: deque[ErrorLogRecord] = deque(maxlen=max_entries)
        self._by_id: dict[str, ErrorLogRecord] = {}
        self._request_count = 0

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def record_request(self, endpoint: str | None = None) -> None:
        """Count one outgoing request."""
        self._request_count += 1

    def log_error(
        self,
        error: ClassifiedError,
        meta: dict[str, Any] | None = None,
    ) -> str:
        """Append ``error`` to the log and return its record id."""
        record = ErrorLogRecord(
            id=f"err_{uuid.uuid4().hex[:16]}",
            error=error,
            timestamp=self._clock(),
            meta=dict(meta or {}),
        )
        if len(self._records) == self._max_entries:
            # the deque drops its oldest entry on append
            self._by_id.pop(self._records[0].id, None)
        self._records.append(record)
        self._by_id[record.id] = record

        operation = error.context.operation or "unknown"
        logger.log(
            _LOG_LEVELS.get(error.severity, "INFO"),
            f"[ErrorMonitor] {error.kind.value} in {operation} "
            f"({error.severity}): {error.raw_message}",
        )
        return record.id

    def resolve_error(self, error_id: str, resolution: Resolution) -> bool:
        """
        Tag a logged error with its final handling.

        Returns False when the record is unknown, which includes records
        already pushed out of the ring buffer.
        """
        if resolution not in RESOLUTIONS:
            raise ValueError(f"Unknown resolution: {resolution}")

        record = self._by_id.get(error_id)
        if record is None:
            return False
        record.resolution = resolution
        record.resolved_at = self._clock()
        return True

    def get_metrics(self) -> ErrorMetrics:
        records = list(self._records)
        by_kind = Counter(r.error.kind.value for r in records)
        by_resolution = Counter(r.resolution for r in records if r.resolution)
        by_operation = Counter(r.error.context.operation or "unknown" for r in records)

        return ErrorMetrics(
            total_errors=len(records),
            errors_by_kind=dict(by_kind),
            errors_by_resolution=dict(by_resolution),
            errors_by_operation=dict(by_operation),
            request_count=self._request_count,
            unresolved=sum(1 for r in records if not r.resolved),
        )

    def get_error_trends(self, window_hours: int = 24) -> dict[str, Any]:
        """
        Bucket the errors of the last ``window_hours`` hours by hour.

        Returns:
            ``{"hourly": [...], "summary": {...}}`` where each hourly bucket
            holds the hour start, the error count and a per-kind breakdown.
        """
        now = self._clock()
        current_hour = now.replace(minute=0, second=0, microsecond=0)
        window_start = current_hour - timedelta(hours=window_hours - 1)

        buckets: dict[datetime, Counter] = {
            window_start + timedelta(hours=i): Counter() for i in range(window_hours)
        }
        for record in self._records:
            hour = record.timestamp.replace(minute=0, second=0, microsecond=0)
            if hour in buckets:
                buckets[hour][record.error.kind.value] += 1

        hourly = [
            {
                "hour": hour.isoformat(),
                "count": sum(kinds.values()),
                "by_kind": dict(kinds),
            }
            for hour, kinds in buckets.items()
        ]

        totals: Counter = Counter()
        for kinds in buckets.values():
            totals.update(kinds)
        total = sum(totals.values())
        peak = max(hourly, key=lambda b: b["count"]) if total else None

        return {
            "hourly": hourly,
            "summary": {
                "total": total,
                "most_common_kind": totals.most_common(1)[0][0] if total else None,
                "average_per_hour": round(total / window_hours, 2) if window_hours else 0.0,
                "peak_hour": peak["hour"] if peak else None,
            },
        }

    def get_error_log(
        self,
        kind: ErrorKind | None = None,
        resolution: Resolution | None = None,
        limit: int | None = None,
    ) -> list[ErrorLogRecord]:
        """Records newest first, optionally filtered."""
        records = [
            r
            for r in reversed(self._records)
            if (kind is None or r.error.kind == kind)
            and (resolution is None or r.resolution == resolution)
        ]
        if limit is not None:
            records = records[:limit]
        return records

    def export(self, format: Literal["json", "csv"] = "json") -> str:
        if format == "json":
            return json.dumps(
                {
                    "exported_at": self._clock().isoformat(),
                    "metrics": self.get_metrics().to_dict(),
                    "errors": [r.to_dict() for r in self._records],
                },
                indent=2,
                ensure_ascii=False,
            )

        if format == "csv":
            buffer = io.StringIO()
            writer = csv.writer(buffer)
            writer.writerow(_CSV_COLUMNS)
            for r in self._records:
                writer.writerow(
                    [
                        r.id,
                        r.timestamp.isoformat(),
                        r.error.kind.value,
                        r.error.severity,
                        r.error.context.operation or "",
                        r.error.context.endpoint or "",
                        r.error.context.game_type or "",
                        r.error.status_code if r.error.status_code is not None else "",
                        r.resolution or "",
                        r.resolved_at.isoformat() if r.resolved_at else "",
                        r.error.raw_message,
                    ]
                )
            return buffer.getvalue()

        raise ValueError(f"Unsupported export format: {format}")

    def clear(self) -> None:
        self._records.clear()
        self._by_id.clear()
        self._request_count = 0
        logger.info("[ErrorMonitor] Error log cleared")

    def __len__(self) -> int:
        return len(self._records)
