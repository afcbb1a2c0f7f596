"""
Admission webhooks for the monitoring operator.

This module provides validating admission webhooks for PodMonitoring and
ServiceMonitoring custom resources. Webhooks validate resources before they
are accepted by Kubernetes, providing immediate feedback and preventing
invalid label mappings from being stored.

Each resource kind is served on its own path; ADMISSION_ROUTES maps the path
to the validation function bound to it.
"""

from monitoring_operator.constants import (
    POD_MONITORING_WEBHOOK_PATH,
    SERVICE_MONITORING_WEBHOOK_PATH,
)

from .admission import AdmissionServer, AdmitFn, create_admission_app
from .podmonitoring import admit_pod_monitoring
from .server import WebhookServer
from .servicemonitoring import admit_service_monitoring

ADMISSION_ROUTES: dict[str, AdmitFn] = {
    POD_MONITORING_WEBHOOK_PATH: admit_pod_monitoring,
    SERVICE_MONITORING_WEBHOOK_PATH: admit_service_monitoring,
}

__all__ = [
    "ADMISSION_ROUTES",
    "AdmissionServer",
    "AdmitFn",
    "WebhookServer",
    "admit_pod_monitoring",
    "admit_service_monitoring",
    "create_admission_app",
]
