"""
Utilities for the refeed-dedup engine.
"""

from .logger import get_logger, setup_logging
from .metrics import MetricEvent, MetricsReporter, get_metrics_reporter

__all__ = [
    "get_logger",
    "setup_logging",
    "get_metrics_reporter",
    "MetricsReporter",
    "MetricEvent",
]
