"""
PodMonitoring and ServiceMonitoring handlers.

The reconciliation loop re-checks every observed monitoring resource with
the same rules the admission webhooks apply, since resources may predate the
webhook or have been stored while it was unavailable. It records the outcome
in the resource status and tracks how many resources are observed. Building
collector configuration from the compiled rules happens downstream.
"""

import logging
from typing import Any

import kopf
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from monitoring_operator.constants import (
    MONITORING_GROUP,
    MONITORING_VERSION,
    POD_LABEL_PREFIX,
    POD_MONITORING_KIND,
    POD_MONITORING_PLURAL,
    SERVICE_LABEL_PREFIX,
    SERVICE_MONITORING_KIND,
    SERVICE_MONITORING_PLURAL,
)
from monitoring_operator.errors import LabelMappingError, PermanentError
from monitoring_operator.models.monitoring import (
    PodMonitoringSpec,
    ServiceMonitoringSpec,
)
from monitoring_operator.observability.metrics import metrics_collector
from monitoring_operator.utils.relabel import label_mapping_relabel_configs

logger = logging.getLogger(__name__)

OBSERVING_REASONS = (kopf.Reason.CREATE, kopf.Reason.RESUME)


def compile_target_labels(kind: str, spec: dict[str, Any]) -> int:
    """
    Decode a monitoring spec and compile its label mappings.

    Args:
        kind: PodMonitoring or ServiceMonitoring
        spec: Resource specification

    Returns:
        Number of compiled relabeling rules

    Raises:
        PermanentError: If the spec is malformed or a mapping is invalid
    """
    spec_model: type[BaseModel] = (
        ServiceMonitoringSpec if kind == SERVICE_MONITORING_KIND else PodMonitoringSpec
    )
    try:
        parsed = spec_model.model_validate(spec)
    except PydanticValidationError as e:
        raise PermanentError(f"invalid {kind} specification", cause=e) from e

    sources = [
        (parsed.target_labels.from_pod, POD_LABEL_PREFIX, "spec.targetLabels.fromPod")
    ]
    if isinstance(parsed, ServiceMonitoringSpec):
        sources.append(
            (
                parsed.target_labels.from_service,
                SERVICE_LABEL_PREFIX,
                "spec.targetLabels.fromService",
            )
        )

    rules = 0
    for mappings, prefix, field in sources:
        try:
            rules += len(label_mapping_relabel_configs(mappings, prefix, field=field))
        except LabelMappingError as e:
            raise PermanentError("checking label mappings", cause=e) from e
    return rules


def observe_monitoring(
    kind: str,
    spec: dict[str, Any],
    name: str,
    namespace: str,
    meta: dict[str, Any],
    patch: kopf.Patch,
    reason: kopf.Reason,
) -> None:
    """Validate an observed resource and record the outcome in its status."""
    logger.info(
        f"Observing {kind} {name} in namespace {namespace} ({reason})",
        extra={"resource_type": kind, "resource_name": name, "namespace": namespace},
    )
    if reason in OBSERVING_REASONS:
        metrics_collector.update_active_resources(kind, namespace, 1)

    patch.status["observedGeneration"] = meta.get("generation")
    try:
        rules = compile_target_labels(kind, spec)
    except PermanentError as e:
        patch.status["message"] = str(e)
        logger.warning(
            f"{kind} {name} has an invalid configuration: {e}",
            extra={"resource_type": kind, "resource_name": name, "namespace": namespace},
        )
        raise e.as_kopf_error() from e

    patch.status["message"] = f"{rules} relabeling rules compiled"


@kopf.on.create(POD_MONITORING_PLURAL, group=MONITORING_GROUP, version=MONITORING_VERSION)
@kopf.on.resume(POD_MONITORING_PLURAL, group=MONITORING_GROUP, version=MONITORING_VERSION)
@kopf.on.update(POD_MONITORING_PLURAL, group=MONITORING_GROUP, version=MONITORING_VERSION)
async def reconcile_pod_monitoring(
    spec: dict[str, Any],
    name: str,
    namespace: str,
    meta: dict[str, Any],
    patch: kopf.Patch,
    reason: kopf.Reason,
    **kwargs: Any,
) -> None:
    observe_monitoring(POD_MONITORING_KIND, spec, name, namespace, meta, patch, reason)


@kopf.on.create(
    SERVICE_MONITORING_PLURAL, group=MONITORING_GROUP, version=MONITORING_VERSION
)
@kopf.on.resume(
    SERVICE_MONITORING_PLURAL, group=MONITORING_GROUP, version=MONITORING_VERSION
)
@kopf.on.update(
    SERVICE_MONITORING_PLURAL, group=MONITORING_GROUP, version=MONITORING_VERSION
)
async def reconcile_service_monitoring(
    spec: dict[str, Any],
    name: str,
    namespace: str,
    meta: dict[str, Any],
    patch: kopf.Patch,
    reason: kopf.Reason,
    **kwargs: Any,
) -> None:
    observe_monitoring(
        SERVICE_MONITORING_KIND, spec, name, namespace, meta, patch, reason
    )


@kopf.on.delete(
    POD_MONITORING_PLURAL, group=MONITORING_GROUP, version=MONITORING_VERSION, optional=True
)
async def forget_pod_monitoring(name: str, namespace: str, **kwargs: Any) -> None:
    logger.info(f"PodMonitoring {name} in namespace {namespace} deleted")
    metrics_collector.update_active_resources(POD_MONITORING_KIND, namespace, -1)


@kopf.on.delete(
    SERVICE_MONITORING_PLURAL,
    group=MONITORING_GROUP,
    version=MONITORING_VERSION,
    optional=True,
)
async def forget_service_monitoring(name: str, namespace: str, **kwargs: Any) -> None:
    logger.info(f"ServiceMonitoring {name} in namespace {namespace} deleted")
    metrics_collector.update_active_resources(SERVICE_MONITORING_KIND, namespace, -1)
