"""Unit tests for admission review decoding and encoding."""

import json

import pytest

from monitoring_operator.errors import DecodeError, ValidationError
from monitoring_operator.models.admission import (
    AdmissionResponse,
    AdmissionReview,
    GroupVersionResource,
    decode_admission_review,
    encode_admission_review,
    to_admission_response,
)
from tests.fixtures.monitoring_resources import VALID_POD_MONITORING, admission_review


def encode(payload) -> bytes:
    return json.dumps(payload).encode()


class TestDecodeAdmissionReview:
    @pytest.mark.parametrize(
        "api_version", ["admission.k8s.io/v1", "admission.k8s.io/v1beta1"]
    )
    def test_supported_versions_decode(self, api_version):
        review = decode_admission_review(
            encode(admission_review(VALID_POD_MONITORING, api_version=api_version))
        )

        assert review.api_version == api_version
        assert review.kind == "AdmissionReview"
        assert review.request.uid == "705ab4f5-6393-11e8-b7cc-42010a800002"
        assert review.request.resource == GroupVersionResource(
            group="monitoring.googleapis.com",
            version="v1alpha1",
            resource="podmonitorings",
        )
        assert review.request.object == VALID_POD_MONITORING

    def test_non_json_body_fails(self):
        with pytest.raises(DecodeError) as exc_info:
            decode_admission_review(b"not json")
        message = str(exc_info.value)
        assert message.startswith("decoding admission review: Invalid JSON")
        assert "\n" not in message
        assert "errors.pydantic.dev" not in message

    def test_wrong_kind_fails(self):
        payload = admission_review(VALID_POD_MONITORING)
        payload["kind"] = "TokenReview"
        with pytest.raises(DecodeError, match="unsupported kind"):
            decode_admission_review(encode(payload))

    def test_unknown_version_fails(self):
        payload = admission_review(VALID_POD_MONITORING, api_version="admission.k8s.io/v2")
        with pytest.raises(DecodeError, match="unsupported admission review version"):
            decode_admission_review(encode(payload))

    def test_missing_request_fails(self):
        payload = {"apiVersion": "admission.k8s.io/v1", "kind": "AdmissionReview"}
        with pytest.raises(DecodeError, match="carries no request"):
            decode_admission_review(encode(payload))


class TestAdmissionResponse:
    def test_error_becomes_failure_status(self):
        response = to_admission_response(
            ValidationError("bad label", field="spec.targetLabels")
        )

        assert response.allowed is False
        assert response.result.status == "Failure"
        assert response.result.message == (
            "validation error in field 'spec.targetLabels': bad label"
        )

    def test_group_version_resource_renders_plural(self):
        gvr = GroupVersionResource(
            group="monitoring.googleapis.com", version="v1alpha1", resource="podmonitorings"
        )
        assert str(gvr) == "monitoring.googleapis.com/v1alpha1, Resource=podmonitorings"


class TestEncodeAdmissionReview:
    def test_denial_uses_wire_names(self):
        review = AdmissionReview(
            api_version="admission.k8s.io/v1",
            kind="AdmissionReview",
            response=to_admission_response(ValueError("boom")),
        )
        review.response.uid = "uid-1"

        body = json.loads(encode_admission_review(review))

        assert body == {
            "apiVersion": "admission.k8s.io/v1",
            "kind": "AdmissionReview",
            "response": {
                "uid": "uid-1",
                "allowed": False,
                "status": {"status": "Failure", "message": "boom"},
            },
        }

    def test_unset_fields_are_omitted(self):
        body = json.loads(
            encode_admission_review(AdmissionReview(response=AdmissionResponse(allowed=True)))
        )
        assert body == {"response": {"uid": "", "allowed": True}}
