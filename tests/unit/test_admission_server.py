"""
Unit tests for the admission review HTTP handling.

The admission application is driven through ``aiohttp.test_utils`` with the
real validators mounted on their webhook paths.
"""

import json
from unittest.mock import MagicMock

import pytest
from aiohttp.test_utils import TestClient, TestServer

from monitoring_operator.models.admission import AdmissionResponse
from monitoring_operator.webhooks import (
    ADMISSION_ROUTES,
    AdmissionServer,
    create_admission_app,
)
from tests.fixtures.monitoring_resources import (
    SERVICE_MONITORING_GVR,
    VALID_POD_MONITORING,
    admission_review,
    with_target_labels,
)

POD_PATH = "/validate/podmonitorings"
SERVICE_PATH = "/validate/servicemonitorings"
UID = "705ab4f5-6393-11e8-b7cc-42010a800002"


@pytest.fixture
def admission_logger():
    return MagicMock()


@pytest.fixture
async def client(admission_logger):
    app = create_admission_app(AdmissionServer(logger=admission_logger), ADMISSION_ROUTES)
    async with TestClient(TestServer(app)) as cli:
        yield cli


async def post_review(client, path, payload):
    return await client.post(
        path,
        data=json.dumps(payload),
        headers={"Content-Type": "application/json"},
    )


class TestAdmissionDecisions:
    """Decisions returned in the AdmissionReview response."""

    @pytest.mark.asyncio
    async def test_valid_resource_is_allowed(self, client):
        resp = await post_review(client, POD_PATH, admission_review(VALID_POD_MONITORING))

        assert resp.status == 200
        assert resp.content_type == "application/json"
        body = await resp.json()
        assert body == {
            "apiVersion": "admission.k8s.io/v1",
            "kind": "AdmissionReview",
            "response": {"uid": UID, "allowed": True},
        }

    @pytest.mark.asyncio
    async def test_v1beta1_version_is_echoed(self, client):
        payload = admission_review(
            VALID_POD_MONITORING, api_version="admission.k8s.io/v1beta1"
        )
        resp = await post_review(client, POD_PATH, payload)

        body = await resp.json()
        assert body["apiVersion"] == "admission.k8s.io/v1beta1"
        assert body["response"]["allowed"] is True

    @pytest.mark.asyncio
    async def test_invalid_mapping_is_denied_with_status(self, client, admission_logger):
        obj = with_target_labels(
            VALID_POD_MONITORING, fromPod=[{"from": "team", "to": "namespace"}]
        )
        resp = await post_review(client, POD_PATH, admission_review(obj))

        assert resp.status == 200
        body = await resp.json()
        response = body["response"]
        assert response["uid"] == UID
        assert response["allowed"] is False
        assert response["status"]["status"] == "Failure"
        assert response["status"]["message"].startswith("checking label mappings: ")
        assert body["kind"] == "AdmissionReview"

        admission_logger.error.assert_called_once()
        extra = admission_logger.error.call_args.kwargs["extra"]
        assert extra["uid"] == UID
        assert extra["error_type"] == "AdmissionError"

    @pytest.mark.asyncio
    async def test_resource_on_wrong_path_is_denied(self, client):
        payload = admission_review(VALID_POD_MONITORING)
        resp = await post_review(client, SERVICE_PATH, payload)

        body = await resp.json()
        assert body["response"]["allowed"] is False
        assert body["response"]["status"]["message"] == (
            "expected resource to be monitoring.googleapis.com/v1alpha1, "
            "Resource=servicemonitorings, but received "
            "monitoring.googleapis.com/v1alpha1, Resource=podmonitorings"
        )

    @pytest.mark.asyncio
    async def test_service_monitoring_path_serves_its_kind(self, client):
        obj = {"spec": {"targetLabels": {"fromService": [{"from": "tier"}]}}}
        payload = admission_review(obj, resource=SERVICE_MONITORING_GVR)
        resp = await post_review(client, SERVICE_PATH, payload)

        body = await resp.json()
        assert body["response"]["allowed"] is True


class TestUndecodableReviews:
    """Bodies that cannot be decoded are still answered with a denial."""

    @pytest.mark.asyncio
    async def test_non_json_body_is_denied_without_identity(self, client, admission_logger):
        resp = await client.post(POD_PATH, data=b"{not json")

        assert resp.status == 200
        body = await resp.json()
        assert "apiVersion" not in body
        assert "kind" not in body
        assert body["response"]["uid"] == ""
        assert body["response"]["allowed"] is False
        assert body["response"]["status"]["message"].startswith(
            "decoding admission review: "
        )
        extra = admission_logger.error.call_args.kwargs["extra"]
        assert extra["operation"] == "decode_body"

    @pytest.mark.asyncio
    async def test_empty_body_is_denied(self, client):
        resp = await client.post(POD_PATH, data=b"")

        assert resp.status == 200
        body = await resp.json()
        assert body["response"]["allowed"] is False

    @pytest.mark.asyncio
    async def test_review_without_request_is_denied(self, client):
        payload = {"apiVersion": "admission.k8s.io/v1", "kind": "AdmissionReview"}
        resp = await post_review(client, POD_PATH, payload)

        body = await resp.json()
        assert body["response"]["allowed"] is False
        assert "apiVersion" not in body


class TestValidatorContract:
    """How the server treats what validators return or raise."""

    @pytest.mark.asyncio
    async def test_response_uid_is_overwritten_with_request_uid(self):
        def admit(request):
            return AdmissionResponse(uid="something-else", allowed=True)

        app = create_admission_app(AdmissionServer(logger=MagicMock()), {"/x": admit})
        async with TestClient(TestServer(app)) as cli:
            resp = await post_review(cli, "/x", admission_review(VALID_POD_MONITORING))
            body = await resp.json()

        assert body["response"]["uid"] == UID

    @pytest.mark.asyncio
    async def test_unexpected_validator_failure_is_not_a_decision(self):
        def admit(request):
            raise RuntimeError("validator bug")

        app = create_admission_app(AdmissionServer(logger=MagicMock()), {"/x": admit})
        async with TestClient(TestServer(app)) as cli:
            resp = await post_review(cli, "/x", admission_review(VALID_POD_MONITORING))

        assert resp.status == 500

    @pytest.mark.asyncio
    async def test_only_post_is_routed(self, client):
        resp = await client.get(POD_PATH)
        assert resp.status == 405
