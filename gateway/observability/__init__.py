"""Logging and metrics for the search gateway."""

from .logging import LogContext, configure_logging, get_logger
from .metrics import MetricsCollector, get_metrics_collector

__all__ = [
    "configure_logging",
    "get_logger",
    "LogContext",
    "MetricsCollector",
    "get_metrics_collector",
]
