"""Peering-spine core: the foundation every other layer builds on.

Architecture::

    errors.py          Structured error hierarchy (PeeringError, FieldError)
    result.py          OperationResult[T] envelope (ok / fail / from_error)
    logging.py         structlog configuration + get_logger
    settings.py        PeeringSettings (pydantic-settings, PEERINGDB_ prefix)
    transports/        MCP server scaffold (create_spine_mcp, run_spine_mcp)
"""

from peering_spine.core.errors import (
    BackendError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    FieldError,
    FieldErrorCode,
    InvalidConfigError,
    MalformedIdentifierError,
    MissingCredentialError,
    PayloadValidationError,
    PeeringError,
    UnknownTypeError,
    UnsupportedOperationError,
)
from peering_spine.core.result import OperationError, OperationResult

__all__ = [
    "BackendError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "FieldError",
    "FieldErrorCode",
    "InvalidConfigError",
    "MalformedIdentifierError",
    "MissingCredentialError",
    "OperationError",
    "OperationResult",
    "PayloadValidationError",
    "PeeringError",
    "UnknownTypeError",
    "UnsupportedOperationError",
]
