"""
Validating admission webhook for ServiceMonitoring resources.

Same checks as PodMonitoring, with service label mappings validated in
addition to pod label mappings.
"""

import logging

from pydantic import ValidationError as PydanticValidationError

from monitoring_operator.constants import (
    MONITORING_GROUP,
    MONITORING_VERSION,
    POD_LABEL_PREFIX,
    SERVICE_LABEL_PREFIX,
    SERVICE_MONITORING_PLURAL,
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
from monitoring_operator.models.monitoring import ServiceMonitoring
from monitoring_operator.utils.relabel import label_mapping_relabel_configs

logger = logging.getLogger(__name__)

SERVICE_MONITORING_RESOURCE = GroupVersionResource(
    group=MONITORING_GROUP,
    version=MONITORING_VERSION,
    resource=SERVICE_MONITORING_PLURAL,
)


def admit_service_monitoring(request: AdmissionRequest) -> AdmissionResponse:
    """
    Validate a ServiceMonitoring admission request.

    Pod label mappings are checked first; service label mappings are always
    checked as well, so a resource with valid pod mappings can still be
    rejected for its service mappings.

    Raises:
        ResourceMismatchError: If the request is not for ServiceMonitoring
        DecodeError: If the object does not decode into a ServiceMonitoring
        AdmissionError: If a pod or service label mapping is invalid
    """
    if request.resource != SERVICE_MONITORING_RESOURCE:
        raise ResourceMismatchError(SERVICE_MONITORING_RESOURCE, request.resource)

    try:
        service_monitoring = ServiceMonitoring.model_validate(request.object)
    except PydanticValidationError as e:
        raise DecodeError(
            "unmarshalling admission request to servicemonitoring", cause=e
        ) from e

    target_labels = service_monitoring.spec.target_labels
    try:
        label_mapping_relabel_configs(
            target_labels.from_pod, POD_LABEL_PREFIX, field="spec.targetLabels.fromPod"
        )
    except LabelMappingError as e:
        raise AdmissionError("checking pod label mappings", cause=e) from e

    try:
        label_mapping_relabel_configs(
            target_labels.from_service,
            SERVICE_LABEL_PREFIX,
            field="spec.targetLabels.fromService",
        )
    except LabelMappingError as e:
        raise AdmissionError("checking service label mappings", cause=e) from e

    logger.debug(
        f"ServiceMonitoring {request.namespace}/{request.name} validation passed"
    )
    return AdmissionResponse(allowed=True)
