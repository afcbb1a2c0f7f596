"""
Operator error hierarchy with categorization and cause chaining.

This module defines the error types used throughout the monitoring operator.
Admission errors are mapped to denial decisions by the webhook server, while
reconciliation errors integrate with kopf's retry mechanisms.
"""

import kopf
from pydantic import ValidationError as PydanticValidationError


def describe_cause(cause: BaseException) -> str:
    """Render a cause on one line; pydantic errors as ``loc: msg`` entries."""
    if not isinstance(cause, PydanticValidationError):
        return str(cause)

    entries = []
    for error in cause.errors(include_url=False):
        loc = ".".join(str(part) for part in error["loc"])
        entries.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(entries)


class OperatorError(Exception):
    """
    Base error class for all operator-related exceptions.

    Provides categorization, retry behavior, user guidance and an optional
    underlying cause. The rendered message includes the cause chain, so each
    layer only contributes its own context.
    """

    def __init__(
        self,
        message: str,
        category: str,
        retryable: bool = True,
        delay: int = 30,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize operator error.

        Args:
            message: Human-readable error description
            category: Error category (admission, validation, configuration, ...)
            retryable: Whether kopf should retry this operation
            delay: Suggested retry delay in seconds
            user_action: What user should do to resolve the issue
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.category = category
        self.retryable = retryable
        self.delay = delay
        self.user_action = user_action
        self.cause = cause

    def as_kopf_error(self):
        """Convert to appropriate kopf exception type."""
        if self.retryable:
            return kopf.TemporaryError(str(self), delay=self.delay)
        else:
            return kopf.PermanentError(str(self))

    def __str__(self) -> str:
        """String representation with the cause chain and user guidance."""
        base_msg = self.message
        if self.cause is not None:
            base_msg = f"{base_msg}: {describe_cause(self.cause)}"
        if self.user_action:
            return f"{base_msg}\nAction required: {self.user_action}"
        return base_msg


class AdmissionError(OperatorError):
    """Error that causes an admission request to be denied."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(
            message=message, category="admission", retryable=False, cause=cause
        )


class ResourceMismatchError(AdmissionError):
    """Admission request routed to a webhook that does not serve its resource."""

    def __init__(self, expected: object, received: object):
        super().__init__(
            f"expected resource to be {expected}, but received {received}"
        )
        self.expected = expected
        self.received = received


class DecodeError(AdmissionError):
    """Admission review or embedded object could not be decoded."""


class ValidationError(AdmissionError):
    """Error in resource specification validation."""

    def __init__(
        self, message: str, field: str | None = None, cause: Exception | None = None
    ):
        if field:
            message = f"validation error in field '{field}': {message}"
        super().__init__(message, cause=cause)
        self.category = "validation"
        self.field = field


class LabelMappingError(ValidationError):
    """A label mapping does not compile into a valid relabeling rule."""


class TemporaryError(OperatorError):
    """Temporary error that should be retried."""

    def __init__(self, message: str, delay: int = 30, user_action: str | None = None):
        super().__init__(
            message=message,
            category="temporary",
            retryable=True,
            delay=delay,
            user_action=user_action
            or "Wait for automatic retry or check system status",
        )


class PermanentError(OperatorError):
    """Permanent error that should not be retried."""

    def __init__(
        self,
        message: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category="permanent",
            retryable=False,
            user_action=user_action or "Manual intervention required to resolve",
            cause=cause,
        )


class ConfigurationError(OperatorError):
    """Error in operator configuration or bootstrap."""

    def __init__(
        self,
        message: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category="configuration",
            retryable=False,
            user_action=user_action or "Review and correct configuration",
            cause=cause,
        )
