"""Centralized operator settings using pydantic-settings.

This module provides a single source of truth for all operator configuration
loaded from environment variables. Uses pydantic for automatic validation,
type coercion, and documentation.
"""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from monitoring_operator.constants import (
    DEFAULT_METRICS_PORT,
    DEFAULT_OPERATOR_NAMESPACE,
    DEFAULT_TLS_CERT_DIR,
    DEFAULT_WEBHOOK_PORT,
    LOG_LEVELS,
    TLS_CERT_FILE,
    TLS_KEY_FILE,
)


class Settings(BaseSettings):
    """Operator configuration loaded from environment variables.

    All settings have sensible defaults for production use. Override via
    environment variables as documented per field.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Operator identification
    operator_namespace: str = Field(
        default=DEFAULT_OPERATOR_NAMESPACE,
        description="Namespace in which the operator manages its resources",
        validation_alias="OPERATOR_NAMESPACE",
    )

    # Logging configuration
    log_level: str = Field(
        default="info",
        validation_alias="LOG_LEVEL",
        description=f"Log level to use. Possible values: {', '.join(LOG_LEVELS)}",
    )
    json_logs: bool = Field(
        default=True,
        validation_alias="JSON_LOGS",
        description="Enable JSON formatted logging for structured log aggregation",
    )
    correlation_ids: bool = Field(
        default=True,
        validation_alias="CORRELATION_IDS",
        description="Enable correlation IDs in logs for request tracing",
    )
    log_health_probes: bool = Field(
        default=False,
        validation_alias="LOG_HEALTH_PROBES",
        description="Log health probe and metrics scrape requests",
    )

    # Namespace watching
    namespaces: str = Field(
        default="",
        validation_alias="MONITORING_OPERATOR_NAMESPACES",
        description="Comma-separated list of namespaces to watch (empty = all namespaces)",
    )

    # Kubernetes client
    kubeconfig: str = Field(
        default="",
        validation_alias="KUBECONFIG",
        description="Path to a kubeconfig file (empty = in-cluster, then default kubeconfig)",
    )

    # Admission webhooks
    enable_webhooks: bool = Field(
        default=True,
        validation_alias="ENABLE_WEBHOOKS",
        description="Enable admission webhooks for validation",
    )
    webhook_host: str = Field(
        default="0.0.0.0",
        validation_alias="WEBHOOK_HOST",
        description="Host address to bind the admission webhook server",
    )
    webhook_port: int = Field(
        default=DEFAULT_WEBHOOK_PORT,
        validation_alias="WEBHOOK_PORT",
        description="Port for admission webhook server",
    )
    tls_cert_dir: str = Field(
        default=DEFAULT_TLS_CERT_DIR,
        validation_alias="TLS_CERT_DIR",
        description="Directory holding the externally issued tls.crt and tls.key",
    )

    # Metrics and observability
    metrics_enabled: bool = Field(
        default=True,
        validation_alias="METRICS_ENABLED",
        description="Serve Prometheus metrics and health endpoints",
    )
    metrics_host: str = Field(
        default="0.0.0.0",
        validation_alias="METRICS_HOST",
        description="Host address to bind metrics server",
    )
    metrics_port: int = Field(
        default=DEFAULT_METRICS_PORT,
        validation_alias="METRICS_PORT",
        description="Port for Prometheus metrics endpoint",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().lower()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"log level {v!r} unknown, must be one of ({', '.join(LOG_LEVELS)})"
            )
        return level

    @property
    def watched_namespaces(self) -> list[str] | None:
        """Parse watched namespaces from comma-separated string.

        Returns:
            List of namespace names, or None to watch all namespaces
        """
        if self.namespaces:
            return [ns.strip() for ns in self.namespaces.split(",") if ns.strip()]
        return None

    @property
    def tls_cert_file(self) -> Path:
        return Path(self.tls_cert_dir) / TLS_CERT_FILE

    @property
    def tls_key_file(self) -> Path:
        return Path(self.tls_cert_dir) / TLS_KEY_FILE
