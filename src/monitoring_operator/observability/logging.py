"""
Structured logging utilities for the monitoring operator.

This module provides correlation ID tracking and structured log formatting
for better production troubleshooting. Admission requests use their UID as
correlation ID so a request can be followed through every log entry.
"""

import json
import logging
import uuid
from contextvars import ContextVar
from datetime import UTC, datetime

# Context variable for tracking correlation IDs across async operations
correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Paths that should be filtered from access logs (health probes)
HEALTH_PROBE_PATHS = frozenset({"/healthz", "/ready", "/metrics"})

# Fields copied from log record extras into structured output
STRUCTURED_FIELDS = (
    "method",
    "host",
    "path",
    "uid",
    "resource",
    "resource_type",
    "resource_name",
    "namespace",
    "operation",
    "error_type",
    "actor",
    "duration",
)

# Accepted level names mapped to logging levels
LOG_LEVEL_MAP = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class HealthProbeFilter(logging.Filter):
    """
    Drops routine entries about probe and scrape requests.

    Records carrying a ``path`` extra are matched on it; other records (such as
    aiohttp access lines) on the request line in their message. Warnings and
    errors always pass.
    """

    def __init__(self, suppress_health_logs: bool = True):
        super().__init__()
        self.suppress_health_logs = suppress_health_logs

    def filter(self, record: logging.LogRecord) -> bool:
        if not self.suppress_health_logs or record.levelno >= logging.WARNING:
            return True

        path = getattr(record, "path", None)
        if path is not None:
            return path not in HEALTH_PROBE_PATHS

        message = record.getMessage()
        return not any(f" {probe} " in message for probe in HEALTH_PROBE_PATHS)


class CorrelationIDFilter(logging.Filter):
    """
    Stamps records with the correlation ID of the current context.

    Outside of an admission request the record's ``uid`` extra is used when
    present; otherwise a short ID is generated and kept for the context.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        current = correlation_id.get() or getattr(record, "uid", "")
        if not current:
            current = generate_correlation_id()
            correlation_id.set(current)

        record.correlation_id = current
        return True


class StructuredFormatter(logging.Formatter):
    """
    Structured JSON formatter for logs with correlation ID support.

    Formats log records as structured JSON for better parsing and analysis
    in production monitoring systems.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": getattr(record, "correlation_id", ""),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for field in STRUCTURED_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)

        return json.dumps(log_data, default=str)


def generate_correlation_id() -> str:
    """
    Generate a new correlation ID.

    Returns:
        Unique correlation ID string
    """
    return str(uuid.uuid4())[:8]  # Short 8-character ID for readability


def set_correlation_id(corr_id: str) -> str:
    """Set the correlation ID for the current context."""
    correlation_id.set(corr_id)
    return corr_id


def get_correlation_id() -> str:
    """Get the current correlation ID, or empty string if none set."""
    return correlation_id.get("")


def setup_structured_logging(
    log_level: str = "info",
    enable_json_formatting: bool = True,
    correlation_id_enabled: bool = True,
    log_health_probes: bool = False,
) -> None:
    """
    Set up structured logging for the operator.

    Args:
        log_level: Logging level (debug, info, warn, warning, error)
        enable_json_formatting: Whether to use JSON formatting
        correlation_id_enabled: Whether to enable correlation ID tracking
        log_health_probes: Whether to log health probe requests (default: False)

    Raises:
        ValueError: If the log level is unknown
    """
    level = LOG_LEVEL_MAP.get(log_level.lower())
    if level is None:
        raise ValueError(
            f"log level {log_level!r} unknown, must be one of ({', '.join(LOG_LEVEL_MAP)})"
        )

    root_logger = logging.getLogger()

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()

    if enable_json_formatting:
        formatter = StructuredFormatter()
    elif correlation_id_enabled:
        formatter = logging.Formatter(
            "%(asctime)s - %(correlation_id)s - %(name)s - %(levelname)s - %(message)s"
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    handler.setFormatter(formatter)

    if correlation_id_enabled:
        handler.addFilter(CorrelationIDFilter())

    if not log_health_probes:
        handler.addFilter(HealthProbeFilter(suppress_health_logs=True))

    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Set specific logger levels for third-party libraries
    logging.getLogger("kopf").setLevel(logging.WARNING)
    logging.getLogger("kubernetes").setLevel(logging.WARNING)

    # Suppress aiohttp access logs which spam with probe requests
    logging.getLogger("aiohttp.access").setLevel(logging.WARNING)
    logging.getLogger("aiohttp.server").setLevel(logging.WARNING)
