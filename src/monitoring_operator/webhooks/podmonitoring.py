"""
Validating admission webhook for PodMonitoring resources.

This webhook validates PodMonitoring resources before they are accepted by
Kubernetes, enforcing:
- The request was routed for the PodMonitoring resource
- The object decodes into the PodMonitoring structure
- Every pod label mapping compiles into a valid relabeling rule
"""

import logging

from pydantic import ValidationError as PydanticValidationError

from monitoring_operator.constants import (
    MONITORING_GROUP,
    MONITORING_VERSION,
    POD_LABEL_PREFIX,
    POD_MONITORING_PLURAL,
)
from monitoring_operator.errors import (
    AdmissionError,
    DecodeError,
    LabelMappingError,
    ResourceMismatchError,
)
from monitoring_operator.models.admission import (
    AdmissionRequest,
    AdmissionResponse,
    GroupVersionResource,
)
from monitoring_operator.models.monitoring import PodMonitoring
from monitoring_operator.utils.relabel import label_mapping_relabel_configs

logger = logging.getLogger(__name__)

POD_MONITORING_RESOURCE = GroupVersionResource(
    group=MONITORING_GROUP,
    version=MONITORING_VERSION,
    resource=POD_MONITORING_PLURAL,
)


def admit_pod_monitoring(request: AdmissionRequest) -> AdmissionResponse:
    """
    Validate a PodMonitoring admission request.

    Args:
        request: The decoded admission request

    Returns:
        An allowed admission response

    Raises:
        ResourceMismatchError: If the request is not for PodMonitoring
        DecodeError: If the object does not decode into a PodMonitoring
        AdmissionError: If a pod label mapping is invalid
    """
    if request.resource != POD_MONITORING_RESOURCE:
        raise ResourceMismatchError(POD_MONITORING_RESOURCE, request.resource)

    try:
        pod_monitoring = PodMonitoring.model_validate(request.object)
    except PydanticValidationError as e:
        raise DecodeError(
            "unmarshalling admission request to podmonitoring", cause=e
        ) from e

    try:
        label_mapping_relabel_configs(
            pod_monitoring.spec.target_labels.from_pod,
            POD_LABEL_PREFIX,
            field="spec.targetLabels.fromPod",
        )
    except LabelMappingError as e:
        raise AdmissionError("checking label mappings", cause=e) from e

    logger.debug(f"PodMonitoring {request.namespace}/{request.name} validation passed")
    return AdmissionResponse(allowed=True)
