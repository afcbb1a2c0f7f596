"""
Constants used throughout the monitoring operator.

This module defines constant values used by the operator including:
- Managed resource identities (group, version, plural)
- Admission webhook paths and envelope versions
- Prometheus label prefixes and reserved target labels
- Default configuration values
"""

# Managed custom resources
MONITORING_GROUP = "monitoring.googleapis.com"
MONITORING_VERSION = "v1alpha1"
POD_MONITORING_PLURAL = "podmonitorings"
SERVICE_MONITORING_PLURAL = "servicemonitorings"
POD_MONITORING_KIND = "PodMonitoring"
SERVICE_MONITORING_KIND = "ServiceMonitoring"

# Admission review envelope
ADMISSION_REVIEW_KIND = "AdmissionReview"
ADMISSION_API_VERSIONS = frozenset(
    {
        "admission.k8s.io/v1",
        "admission.k8s.io/v1beta1",
    }
)
STATUS_FAILURE = "Failure"

# Webhook endpoint paths (one per managed resource kind)
POD_MONITORING_WEBHOOK_PATH = f"/validate/{POD_MONITORING_PLURAL}"
SERVICE_MONITORING_WEBHOOK_PATH = f"/validate/{SERVICE_MONITORING_PLURAL}"

# Prometheus service discovery label prefixes
POD_LABEL_PREFIX = "__meta_kubernetes_pod_label_"
SERVICE_LABEL_PREFIX = "__meta_kubernetes_service_label_"

# Labels identifying a target in the managed collection resource model.
# Label mappings may not write to any of them.
TARGET_SCHEMA_LABELS = frozenset(
    {
        "project_id",
        "location",
        "cluster",
        "namespace",
        "job",
        "instance",
        "__address__",
    }
)

# Valid log levels, in the order they are documented
LOG_LEVELS = ("debug", "info", "warn", "warning", "error")

# Default configuration values
DEFAULT_OPERATOR_NAMESPACE = "gmp-system"
DEFAULT_WEBHOOK_PORT = 10250
DEFAULT_METRICS_PORT = 18080
DEFAULT_TLS_CERT_DIR = "/tmp/k8s-webhook-server/serving-certs"
TLS_CERT_FILE = "tls.crt"
TLS_KEY_FILE = "tls.key"

# Actor names used in logs and metrics
ACTOR_SIGNALS = "signals"
ACTOR_WEBHOOK = "webhook"
ACTOR_RECONCILER = "reconciler"
ACTOR_METRICS = "metrics"
