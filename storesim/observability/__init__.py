"""
Observability module - Logging and Metrics.
"""

from storesim.observability.logging import get_logger, log_context, setup_logging
from storesim.observability.metrics import metrics, track_operation

__all__ = [
    "get_logger",
    "log_context",
    "setup_logging",
    "metrics",
    "track_operation",
]
