"""
Pydantic models for the Kubernetes admission review envelope.

The API server wraps every admission request in an AdmissionReview envelope
and expects the same envelope back with a response filled in. Both the
``admission.k8s.io/v1`` and ``admission.k8s.io/v1beta1`` versions share the
same wire layout, so a single set of models decodes either of them.
"""

from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from monitoring_operator.constants import (
    ADMISSION_API_VERSIONS,
    ADMISSION_REVIEW_KIND,
    STATUS_FAILURE,
)
from monitoring_operator.errors import DecodeError


class GroupVersionResource(BaseModel):
    """Identity of a resource type as declared by the API server."""

    model_config = {"frozen": True}

    group: str = ""
    version: str = ""
    resource: str = ""

    def __str__(self) -> str:
        return f"{self.group}/{self.version}, Resource={self.resource}"


class GroupVersionKind(BaseModel):
    """Group, version and kind of the object under admission."""

    model_config = {"frozen": True}

    group: str = ""
    version: str = ""
    kind: str = ""


class AdmissionRequest(BaseModel):
    """The request half of an admission review."""

    model_config = {"populate_by_name": True}

    uid: str = Field("", description="Correlation token echoed in the response")
    kind: GroupVersionKind | None = None
    resource: GroupVersionResource = Field(default_factory=GroupVersionResource)
    name: str = ""
    namespace: str = ""
    operation: str = ""
    object: Any = Field(None, description="Candidate object, decoded by validators")
    old_object: Any = Field(None, alias="oldObject")
    dry_run: bool | None = Field(None, alias="dryRun")


class Status(BaseModel):
    """Subset of metav1.Status carried by denied admission responses."""

    status: str = ""
    message: str = ""
    code: int | None = None


class AdmissionResponse(BaseModel):
    """The response half of an admission review."""

    model_config = {"populate_by_name": True}

    uid: str = ""
    allowed: bool = False
    result: Status | None = Field(None, alias="status")
    warnings: list[str] | None = None


class AdmissionReview(BaseModel):
    """Versioned admission review envelope."""

    model_config = {"populate_by_name": True}

    api_version: str | None = Field(None, alias="apiVersion")
    kind: str | None = None
    request: AdmissionRequest | None = None
    response: AdmissionResponse | None = None


def to_admission_response(err: Exception) -> AdmissionResponse:
    """Build a denied admission response carrying the error's message."""
    return AdmissionResponse(
        allowed=False,
        result=Status(status=STATUS_FAILURE, message=str(err)),
    )


def decode_admission_review(data: bytes) -> AdmissionReview:
    """
    Decode a request body into an admission review.

    Args:
        data: Raw request body

    Returns:
        The decoded admission review, guaranteed to carry a request

    Raises:
        DecodeError: If the body is not a supported admission review
    """
    try:
        review = AdmissionReview.model_validate_json(data)
    except PydanticValidationError as e:
        raise DecodeError("decoding admission review", cause=e) from e

    if review.kind != ADMISSION_REVIEW_KIND:
        raise DecodeError(f"unsupported kind {review.kind!r}, expected AdmissionReview")
    if review.api_version not in ADMISSION_API_VERSIONS:
        raise DecodeError(
            f"unsupported admission review version {review.api_version!r}, "
            f"expected one of ({', '.join(sorted(ADMISSION_API_VERSIONS))})"
        )
    if review.request is None:
        raise DecodeError("admission review carries no request")
    return review


def encode_admission_review(review: AdmissionReview) -> bytes:
    """Serialize an admission review to its JSON wire form."""
    return review.model_dump_json(by_alias=True, exclude_none=True).encode()
