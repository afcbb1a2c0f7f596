"""
Error handling module for the monitoring operator.

This module provides an error hierarchy that integrates with kopf and the
admission webhook server, with clear categorization for different types
of failures.
"""

from .operator_errors import (
    AdmissionError,
    ConfigurationError,
    DecodeError,
    LabelMappingError,
    OperatorError,
    PermanentError,
    ResourceMismatchError,
    TemporaryError,
    ValidationError,
)

__all__ = [
    "OperatorError",
    "AdmissionError",
    "ResourceMismatchError",
    "DecodeError",
    "ValidationError",
    "LabelMappingError",
    "TemporaryError",
    "PermanentError",
    "ConfigurationError",
]
