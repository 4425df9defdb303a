"""
Error monitoring - bounded error log, metrics and trends.
"""

from linguaspark.monitoring.error_monitor import (
    ErrorLogRecord,
    ErrorMetrics,
    ErrorMonitor,
    Resolution,
)

__all__ = [
    "ErrorLogRecord",
    "ErrorMetrics",
    "ErrorMonitor",
    "Resolution",
]
