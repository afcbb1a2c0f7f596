"""
Pydantic models for PodMonitoring and ServiceMonitoring resources.

Both resources select scrape targets and describe how metadata labels of the
selected pods (and services) are copied onto the scraped series. They differ
only in which label sources are available.
"""

from typing import Any

from pydantic import BaseModel, Field


class LabelMapping(BaseModel):
    """Copies a Kubernetes label onto target labels, optionally renaming it."""

    model_config = {"populate_by_name": True}

    from_: str = Field(..., alias="from", description="Kubernetes label key")
    to: str = Field("", description="Target label name (defaults to 'from')")


class LabelSelectorRequirement(BaseModel):
    key: str
    operator: str
    values: list[str] = Field(default_factory=list)


class LabelSelector(BaseModel):
    """Standard Kubernetes label selector."""

    model_config = {"populate_by_name": True}

    match_labels: dict[str, str] = Field(default_factory=dict, alias="matchLabels")
    match_expressions: list[LabelSelectorRequirement] = Field(
        default_factory=list, alias="matchExpressions"
    )


class ScrapeEndpoint(BaseModel):
    """A port and scrape configuration for the selected targets."""

    model_config = {"populate_by_name": True}

    port: int | str = Field(..., description="Port name or number")
    scheme: str = ""
    path: str = ""
    params: dict[str, list[str]] = Field(default_factory=dict)
    proxy_url: str = Field("", alias="proxyUrl")
    interval: str = ""
    timeout: str = ""


class PodTargetLabels(BaseModel):
    """Label sources available to PodMonitoring."""

    model_config = {"populate_by_name": True}

    from_pod: list[LabelMapping] = Field(default_factory=list, alias="fromPod")


class ServiceTargetLabels(PodTargetLabels):
    """Label sources available to ServiceMonitoring."""

    from_service: list[LabelMapping] = Field(
        default_factory=list, alias="fromService"
    )


class PodMonitoringSpec(BaseModel):
    model_config = {"populate_by_name": True}

    selector: LabelSelector = Field(default_factory=LabelSelector)
    endpoints: list[ScrapeEndpoint] = Field(default_factory=list)
    target_labels: PodTargetLabels = Field(
        default_factory=PodTargetLabels, alias="targetLabels"
    )


class ServiceMonitoringSpec(BaseModel):
    model_config = {"populate_by_name": True}

    selector: LabelSelector = Field(default_factory=LabelSelector)
    endpoints: list[ScrapeEndpoint] = Field(default_factory=list)
    target_labels: ServiceTargetLabels = Field(
        default_factory=ServiceTargetLabels, alias="targetLabels"
    )


class PodMonitoring(BaseModel):
    """PodMonitoring custom resource."""

    model_config = {"populate_by_name": True}

    api_version: str = Field("", alias="apiVersion")
    kind: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    spec: PodMonitoringSpec = Field(default_factory=PodMonitoringSpec)


class ServiceMonitoring(BaseModel):
    """ServiceMonitoring custom resource."""

    model_config = {"populate_by_name": True}

    api_version: str = Field("", alias="apiVersion")
    kind: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    spec: ServiceMonitoringSpec = Field(default_factory=ServiceMonitoringSpec)
