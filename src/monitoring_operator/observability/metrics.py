"""
Prometheus metrics for the monitoring operator.

This module provides metrics collection for admission webhook traffic,
orchestrated actor lifecycles and observed monitoring resources, plus the
HTTP server that exposes them together with health endpoints.
"""

import logging
import time
from collections.abc import Callable

# aiohttp is provided by kopf and also serves the admission webhooks.
from aiohttp.web import (
    Application,
    AppRunner,
    Request,
    Response,
    TCPSite,
    json_response,
)
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

# Global metrics registry
_metrics_registry: CollectorRegistry | None = None

# Metrics definitions
ADMISSION_REQUESTS_TOTAL = Counter(
    "monitoring_operator_admission_requests_total",
    "Total number of admission review requests",
    ["path", "result"],
    registry=None,  # Will be set during initialization
)

ADMISSION_DURATION = Histogram(
    "monitoring_operator_admission_duration_seconds",
    "Time spent evaluating admission review requests",
    ["path"],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
    registry=None,
)

ACTOR_EXITS_TOTAL = Counter(
    "monitoring_operator_actor_exits_total",
    "Total number of orchestrated actor exits",
    ["actor", "result"],
    registry=None,
)

ACTIVE_RESOURCES = Gauge(
    "monitoring_operator_active_resources",
    "Number of monitoring resources observed by the reconciliation loop",
    ["resource_type", "namespace"],
    registry=None,
)


def get_metrics_registry() -> CollectorRegistry:
    """Get or create the global metrics registry."""
    global _metrics_registry

    if _metrics_registry is None:
        _metrics_registry = CollectorRegistry()

        for metric in [
            ADMISSION_REQUESTS_TOTAL,
            ADMISSION_DURATION,
            ACTOR_EXITS_TOTAL,
            ACTIVE_RESOURCES,
        ]:
            _metrics_registry.register(metric)

    return _metrics_registry


class MetricsCollector:
    """Collects and manages metrics for the monitoring operator."""

    def __init__(self):
        self.registry = get_metrics_registry()

    def record_admission(self, path: str, allowed: bool, duration: float) -> None:
        """Record the outcome of one admission review."""
        result = "allowed" if allowed else "denied"
        ADMISSION_REQUESTS_TOTAL.labels(path=path, result=result).inc()
        ADMISSION_DURATION.labels(path=path).observe(duration)

    def record_actor_exit(self, actor: str, error: BaseException | None) -> None:
        """Record an orchestrated actor returning, cleanly or with an error."""
        result = "success" if error is None else "error"
        ACTOR_EXITS_TOTAL.labels(actor=actor, result=result).inc()

    def update_active_resources(
        self, resource_type: str, namespace: str, delta: int
    ) -> None:
        """Adjust the number of observed resources of a type in a namespace."""
        ACTIVE_RESOURCES.labels(resource_type=resource_type, namespace=namespace).inc(
            delta
        )


class MetricsServer:
    """HTTP server for Prometheus metrics and health endpoints."""

    def __init__(
        self,
        port: int = 18080,
        host: str = "0.0.0.0",
        readiness_check: Callable[[], bool] | None = None,
    ):
        """
        Initialize metrics server.

        Args:
            port: Port to serve metrics on
            host: Host to bind to
            readiness_check: Returns True once the operator can serve requests
        """
        self.port = port
        self.host = host
        self.readiness_check = readiness_check
        self.app = Application()
        self.runner: AppRunner | None = None
        self.site: TCPSite | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        """Setup HTTP routes for metrics and health endpoints."""
        self.app.router.add_get("/metrics", self._metrics_handler)
        self.app.router.add_get("/ready", self._ready_handler)
        self.app.router.add_get("/healthz", self._healthz_handler)

    async def _metrics_handler(self, request: Request) -> Response:
        """Handle /metrics endpoint for Prometheus scraping."""
        try:
            registry = get_metrics_registry()
            metrics_data = generate_latest(registry)
            return Response(
                body=metrics_data, headers={"Content-Type": CONTENT_TYPE_LATEST}
            )
        except Exception as e:
            logger.error(f"Failed to generate metrics: {e}")
            return Response(
                text=f"Error generating metrics: {type(e).__name__}. Check logs for details.",
                status=500,
            )

    async def _ready_handler(self, request: Request) -> Response:
        """Handle /ready endpoint for readiness probes."""
        ready = self.readiness_check() if self.readiness_check else True
        return json_response(
            {"status": "ready" if ready else "not_ready", "timestamp": time.time()},
            status=200 if ready else 503,
        )

    async def _healthz_handler(self, request: Request) -> Response:
        """Handle /healthz endpoint for Kubernetes compatibility."""
        return Response(text="ok")

    async def start(self) -> None:
        """Start the metrics server."""
        try:
            self.runner = AppRunner(self.app)
            await self.runner.setup()

            self.site = TCPSite(self.runner, self.host, self.port)
            await self.site.start()

            logger.info(f"Metrics server started on {self.host}:{self.port}")
        except Exception as e:
            logger.error(f"Failed to start metrics server: {e}")
            raise

    async def stop(self) -> None:
        """Stop the metrics server."""
        if self.site:
            await self.site.stop()
            self.site = None

        if self.runner:
            await self.runner.cleanup()
            self.runner = None

        logger.info("Metrics server stopped")

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.stop()


# Global metrics collector instance
metrics_collector = MetricsCollector()
