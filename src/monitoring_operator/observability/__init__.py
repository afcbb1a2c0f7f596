"""
Observability utilities for the monitoring operator.

This module provides metrics, health endpoints, and structured logging
capabilities for production monitoring and troubleshooting.
"""

from .logging import set_correlation_id, setup_structured_logging
from .metrics import MetricsServer, get_metrics_registry, metrics_collector

__all__ = [
    "MetricsServer",
    "get_metrics_registry",
    "metrics_collector",
    "set_correlation_id",
    "setup_structured_logging",
]
