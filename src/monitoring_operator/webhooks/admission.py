"""
Admission review protocol handling.

An AdmissionServer turns a validation function into an aiohttp handler that
reads an AdmissionReview, evaluates it and writes the AdmissionReview
response. Every failure is turned into a denied response, so the API server
always receives a decision with HTTP 200 unless the response cannot be
written at all.
"""

import logging
import time
from collections.abc import Awaitable, Callable, Mapping

from aiohttp import ClientError, web
from pydantic_core import PydanticSerializationError

from monitoring_operator.errors import DecodeError, OperatorError
from monitoring_operator.models.admission import (
    AdmissionRequest,
    AdmissionResponse,
    AdmissionReview,
    decode_admission_review,
    encode_admission_review,
    to_admission_response,
)
from monitoring_operator.observability.logging import set_correlation_id
from monitoring_operator.observability.metrics import metrics_collector

AdmitFn = Callable[[AdmissionRequest], AdmissionResponse]
Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


class AdmissionServer:
    """Serves Kubernetes resource admission requests."""

    def __init__(self, logger: logging.Logger | None = None):
        """
        Initialize the admission server.

        Args:
            logger: Logger for request and failure entries (defaults to the module logger)
        """
        self.logger = logger or logging.getLogger(__name__)

    def serve_admission(self, admit: AdmitFn) -> Handler:
        """
        Build an aiohttp handler that evaluates admission requests with ``admit``.

        Encountered errors are logged and returned in the admission response.
        """

        async def handler(request: web.Request) -> web.StreamResponse:
            started = time.monotonic()
            self.logger.debug(
                "Admission webhook called",
                extra={
                    "method": request.method,
                    "host": request.host,
                    "path": request.path,
                },
            )

            review, response = await self._evaluate(request, admit)

            # Return the same API version, kind and UID as long as the
            # incoming review was decoded.
            reply = AdmissionReview(response=response)
            if review is not None and review.request is not None:
                reply.api_version = review.api_version
                reply.kind = review.kind
                response.uid = review.request.uid

            metrics_collector.record_admission(
                request.path, response.allowed, time.monotonic() - started
            )
            return await self._write(request, reply)

        return handler

    async def _evaluate(
        self, request: web.Request, admit: AdmitFn
    ) -> tuple[AdmissionReview | None, AdmissionResponse]:
        """Read, decode and evaluate one admission request."""
        try:
            data = await request.read()
        except (ClientError, web.HTTPException, OSError) as e:
            self.logger.error(
                f"Failed to read admission request body: {e}",
                extra={"operation": "read_body", "error_type": type(e).__name__},
            )
            return None, to_admission_response(e)

        try:
            review = decode_admission_review(data)
        except DecodeError as e:
            self.logger.error(
                f"Failed to decode admission request body: {e}",
                extra={"operation": "decode_body", "error_type": type(e).__name__},
            )
            return None, to_admission_response(e)

        admission_request = review.request
        set_correlation_id(admission_request.uid)
        try:
            return review, admit(admission_request)
        except OperatorError as e:
            self.logger.error(
                f"Admission request denied: {e}",
                extra={
                    "operation": "admit",
                    "uid": admission_request.uid,
                    "resource": str(admission_request.resource),
                    "error_type": type(e).__name__,
                },
            )
            return review, to_admission_response(e)

    async def _write(
        self, request: web.Request, reply: AdmissionReview
    ) -> web.StreamResponse:
        """Encode and write the admission response; failures are only logged."""
        try:
            body = encode_admission_review(reply)
        except PydanticSerializationError as e:
            self.logger.error(
                f"Failed to encode admission response body: {e}",
                extra={"operation": "encode_body", "error_type": type(e).__name__},
            )
            body = b""

        response = web.StreamResponse(status=200)
        response.content_type = "application/json"
        response.content_length = len(body)
        try:
            await response.prepare(request)
            await response.write(body)
            await response.write_eof()
        except ConnectionError as e:
            self.logger.error(
                f"Failed to write admission response body: {e}",
                extra={"operation": "write_body", "error_type": type(e).__name__},
            )
        return response


def create_admission_app(
    admission_server: AdmissionServer, routes: Mapping[str, AdmitFn]
) -> web.Application:
    """
    Create the aiohttp application serving one webhook path per resource kind.

    Args:
        admission_server: Protocol handler shared by all routes
        routes: Mapping of webhook path to validation function

    Returns:
        The aiohttp application
    """
    app = web.Application()
    for path, admit in routes.items():
        app.router.add_post(path, admission_server.serve_admission(admit))
    return app
