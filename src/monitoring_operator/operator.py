#!/usr/bin/env python3
"""
Monitoring Operator - Main entry point.

The operator runs as one group of actors sharing a fate:
- a termination signal watcher (SIGINT, SIGTERM)
- the admission webhook HTTPS server
- the Kopf reconciliation loop
- the metrics and health server (when enabled)

When any of them returns, the others are stopped and the process exits with
the first actor's outcome.

Usage:
    python -m monitoring_operator.operator
    # Or via the installed script:
    monitoring-operator

Environment Variables:
    LOG_LEVEL: Logging level (debug, info, warn, error)
    MONITORING_OPERATOR_NAMESPACES: Comma-separated list of namespaces to watch
    WEBHOOK_PORT: Port of the admission webhook server
    TLS_CERT_DIR: Directory holding the webhook serving certificate
"""

import asyncio
import logging
import sys
from typing import Any

import kopf
from pydantic import ValidationError as PydanticValidationError

# Import handler modules to register them with kopf
from monitoring_operator.handlers import monitoring  # noqa: F401
from monitoring_operator.constants import (
    ACTOR_METRICS,
    ACTOR_RECONCILER,
    ACTOR_SIGNALS,
    ACTOR_WEBHOOK,
)
from monitoring_operator.errors import ConfigurationError
from monitoring_operator.observability.logging import setup_structured_logging
from monitoring_operator.observability.metrics import MetricsServer
from monitoring_operator.runtime import (
    Group,
    ReconcilerActor,
    ServingActor,
    SignalWatcher,
)
from monitoring_operator.settings import Settings
from monitoring_operator.utils.kubernetes import (
    load_kubernetes_config,
    load_tls_context,
)
from monitoring_operator.webhooks import (
    ADMISSION_ROUTES,
    AdmissionServer,
    WebhookServer,
    create_admission_app,
)

logger = logging.getLogger(__name__)


@kopf.on.login()
def login(**kwargs: Any) -> kopf.ConnectionInfo | None:
    """Authenticate kopf with the configuration loaded by the kubernetes client."""
    return kopf.login_via_client(**kwargs)


class Operator:
    """Hosts the admission webhooks and the reconciliation loop."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.webhook_server: WebhookServer | None = None

    @property
    def ready(self) -> bool:
        """Whether the operator serves admission requests (or has none to serve)."""
        if not self.settings.enable_webhooks:
            return True
        return self.webhook_server is not None and self.webhook_server.serving

    async def init_admission_resources(self) -> WebhookServer:
        """
        Prepare the admission webhook server.

        Returns:
            A server ready to be started

        Raises:
            ConfigurationError: If the serving certificate cannot be loaded
        """
        ssl_context = load_tls_context(
            self.settings.tls_cert_file, self.settings.tls_key_file
        )
        app = create_admission_app(AdmissionServer(), ADMISSION_ROUTES)
        self.webhook_server = WebhookServer(
            app,
            host=self.settings.webhook_host,
            port=self.settings.webhook_port,
            ssl_context=ssl_context,
        )
        return self.webhook_server

    async def init_metrics_server(self) -> MetricsServer:
        return MetricsServer(
            port=self.settings.metrics_port,
            host=self.settings.metrics_host,
            readiness_check=lambda: self.ready,
        )

    async def run(self, stop_flag: asyncio.Event) -> None:
        """Run the reconciliation loop until the stop flag is raised."""
        kopf_settings = kopf.OperatorSettings()
        kopf_settings.admission.server = None
        kopf_settings.admission.managed = None

        watched_namespaces = self.settings.watched_namespaces
        if watched_namespaces:
            logger.info(f"Watching namespaces: {', '.join(watched_namespaces)}")
        else:
            logger.info("Watching all namespaces (cluster-wide mode)")

        await kopf.operator(
            clusterwide=not watched_namespaces,
            namespaces=watched_namespaces or (),
            settings=kopf_settings,
            stop_flag=stop_flag,
        )

    def build_group(self) -> Group:
        """Register every actor of the operator with a new group."""
        group = Group()

        signals = SignalWatcher()
        group.add(signals.execute, signals.interrupt, name=ACTOR_SIGNALS)

        if self.settings.enable_webhooks:
            webhook = ServingActor(self.init_admission_resources)
            group.add(webhook.execute, webhook.interrupt, name=ACTOR_WEBHOOK)
        else:
            logger.info("Admission webhooks DISABLED")

        reconciler = ReconcilerActor(self.run)
        group.add(reconciler.execute, reconciler.interrupt, name=ACTOR_RECONCILER)

        if self.settings.metrics_enabled:
            metrics = ServingActor(self.init_metrics_server)
            group.add(metrics.execute, metrics.interrupt, name=ACTOR_METRICS)

        return group


def main() -> None:
    """
    Main entry point for the operator.

    Exit codes:
        0: graceful shutdown
        1: an actor failed or Kubernetes configuration could not be loaded
        2: invalid operator settings
    """
    try:
        settings = Settings()
        setup_structured_logging(
            log_level=settings.log_level,
            enable_json_formatting=settings.json_logs,
            correlation_id_enabled=settings.correlation_ids,
            log_health_probes=settings.log_health_probes,
        )
    except (PydanticValidationError, ValueError) as e:
        print(f"Creating logger failed: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        load_kubernetes_config(settings.kubeconfig)
    except ConfigurationError as e:
        logger.error(f"Building kubeconfig failed: {e}")
        sys.exit(1)

    operator = Operator(settings)
    try:
        asyncio.run(operator.build_group().run())
    except (Exception, asyncio.CancelledError) as e:
        logger.error(f"Exit with error: {e}", exc_info=True)
        sys.exit(1)

    logger.info("Monitoring operator stopped")


if __name__ == "__main__":
    main()
