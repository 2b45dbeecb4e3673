"""
Structured error types for peering-spine.

Every failure the engine can produce is a typed :class:`PeeringError`
carrying a machine-readable ``code``, an :class:`ErrorCategory`, a retry
hint, structured context, and an optional chained cause. Callers that
surface errors to a client (the MCP tools, the CLI, the bulk processor)
serialise them with :meth:`PeeringError.to_dict` instead of parsing
message strings.

Manifesto:
    - **Typed Error Hierarchy:** One class per failure in the taxonomy
    - **Validation before I/O:** Validation errors never reach the network
    - **Rich Context:** Errors carry type name, operation and URL metadata
    - **Error Chaining:** Transport failures are kept as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       PeeringError                               │
        │        (code, category, retryable, context, cause)               │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  UnknownTypeError          MalformedIdentifierError              │
        │  UnsupportedOperationError (PARSE)                               │
        │  PayloadValidationError                                          │
        │  (VALIDATION)                                                    │
        │                                                                  │
        │  MissingCredentialError    BackendError       ConfigError        │
        │  (AUTH)                    (SOURCE)           (CONFIG)           │
        │                                                   │              │
        │                                            InvalidConfigError    │
        └─────────────────────────────────────────────────────────────────┘

    Field-level validation failures are not exceptions of their own: a
    :class:`PayloadValidationError` holds an ordered list of
    :class:`FieldError` records whose ``code`` is one of
    :class:`FieldErrorCode` (``MISSING_REQUIRED_FIELD``,
    ``INVALID_FIELD_VALUE``, ``UNEXPECTED_FIELD``, ``MISSING_INSTANCE_ID``).

Examples:
    >>> error = UnknownTypeError("carrier", known=["org", "net"])
    >>> error.code
    'UNKNOWN_TYPE'
    >>> error.to_dict()["category"]
    'VALIDATION'

    >>> error = BackendError("Rate limit exceeded. Please try again later.", status=429)
    >>> error.retryable
    True

Tags:
    error-handling, exception-hierarchy, validation, peering-spine

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    NETWORK = "NETWORK"  # Connection, timeout, DNS
    SOURCE = "SOURCE"  # Upstream API rejected the call
    PARSE = "PARSE"  # Malformed identifiers
    VALIDATION = "VALIDATION"  # Schema, constraint violations
    CONFIG = "CONFIG"  # Registry or settings problems
    AUTH = "AUTH"  # Missing or rejected credentials
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        object_type: Registry type name involved in the failing call
        operation: Operation tag (``create``, ``update``, ``patch``, ``delete``)
        instance_id: Instance identifier for non-create operations
        url: Backend URL that was being accessed
        http_status: HTTP status code if applicable
        metadata: Additional key-value pairs
    """

    object_type: str | None = None
    operation: str | None = None
    instance_id: str | int | None = None
    url: str | None = None
    http_status: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ["object_type", "operation", "instance_id", "url", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class PeeringError(Exception):
    """
    Base exception for all peering-spine errors.

    Subclasses set ``code``, ``default_category`` and ``default_retryable``
    class attributes so that call sites only pass the message and whatever
    context they have.

    Examples:
        >>> error = PeeringError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> error = PeeringError("Fetch failed").with_context(object_type="net")
        >>> error.context.object_type
        'net'
    """

    code: str = "INTERNAL_ERROR"
    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> PeeringError:
        """
        Add context to this error (fluent API).

        Usage:
            raise BackendError("Failed").with_context(object_type="net", url=url)
        """
        for key, value in kwargs.items():
            if key != "metadata" and hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def details(self) -> dict[str, Any]:
        """Error-specific detail fields merged into :meth:`to_dict`."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        result.update(self.details())
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, code={self.code})"


# =============================================================================
# REGISTRY / ROUTING ERRORS
# =============================================================================


class UnknownTypeError(PeeringError):
    """Object type is not present in the type registry."""

    code = "UNKNOWN_TYPE"
    default_category = ErrorCategory.VALIDATION

    def __init__(self, type_name: str, *, known: Iterable[str] = (), **kwargs: Any):
        self.type_name = type_name
        self.known = list(known)
        message = f"Unknown object type: {type_name}"
        if self.known:
            message += f". Available: {', '.join(self.known)}"
        super().__init__(message, **kwargs)

    def details(self) -> dict[str, Any]:
        return {"type_name": self.type_name}


class UnsupportedOperationError(PeeringError):
    """Object type does not allow the requested operation."""

    code = "UNSUPPORTED_OPERATION"
    default_category = ErrorCategory.VALIDATION

    def __init__(self, type_name: str, operation: str, **kwargs: Any):
        self.type_name = type_name
        self.operation = operation
        super().__init__(f"Operation '{operation}' is not supported for {type_name}", **kwargs)

    def details(self) -> dict[str, Any]:
        return {"type_name": self.type_name, "operation": self.operation}


class MalformedIdentifierError(PeeringError):
    """Resource identifier could not be parsed."""

    code = "MALFORMED_IDENTIFIER"
    default_category = ErrorCategory.PARSE

    def __init__(self, message: str, *, identifier: str, **kwargs: Any):
        self.identifier = identifier
        super().__init__(message, **kwargs)

    def details(self) -> dict[str, Any]:
        return {"identifier": self.identifier}


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class FieldErrorCode(str, Enum):
    """Per-field validation failure codes."""

    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    INVALID_FIELD_VALUE = "InvalidFieldValue"
    UNEXPECTED_FIELD = "UnexpectedField"
    MISSING_INSTANCE_ID = "MissingInstanceId"


@dataclass(frozen=True, slots=True)
class FieldError:
    """One field-level validation failure.

    Attributes:
        path: Dotted path of the offending field (``""`` for the payload itself).
        message: Human-readable description.
        code: :class:`FieldErrorCode` classification.
    """

    path: str
    message: str
    code: FieldErrorCode = FieldErrorCode.INVALID_FIELD_VALUE

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message, "code": self.code.value}


class PayloadValidationError(PeeringError):
    """
    Payload failed its object schema.

    Never retryable; the payload must be fixed. ``field_errors`` preserves the
    order in which the schema reported the failures.
    """

    code = "VALIDATION_FAILED"
    default_category = ErrorCategory.VALIDATION

    def __init__(
        self,
        type_name: str,
        operation: str,
        field_errors: Sequence[FieldError],
        **kwargs: Any,
    ):
        self.type_name = type_name
        self.operation = operation
        self.field_errors = list(field_errors)
        issues = ", ".join(f"{e.path}: {e.message}" for e in self.field_errors)
        super().__init__(f"Validation failed for {type_name}: {issues}", **kwargs)

    def codes_for(self, path: str) -> list[FieldErrorCode]:
        """Return every error code reported for *path*."""
        return [e.code for e in self.field_errors if e.path == path]

    def details(self) -> dict[str, Any]:
        return {
            "type_name": self.type_name,
            "operation": self.operation,
            "field_errors": [e.to_dict() for e in self.field_errors],
        }


# =============================================================================
# BACKEND / AUTH ERRORS
# =============================================================================


class MissingCredentialError(PeeringError):
    """A write was attempted without an API key configured."""

    code = "MISSING_CREDENTIAL"
    default_category = ErrorCategory.AUTH

    def __init__(self, message: str | None = None, **kwargs: Any):
        super().__init__(
            message
            or "API key is required for write operations. Please set PEERINGDB_API_KEY environment variable.",
            **kwargs,
        )


class BackendError(PeeringError):
    """
    The backend rejected a call or could not be reached.

    ``retryable`` is informational only (set for 429 and 5xx responses and
    for transport failures); the engine itself never retries.
    """

    code = "BACKEND_ERROR"
    default_category = ErrorCategory.SOURCE

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        body: Any = None,
        url: str | None = None,
        **kwargs: Any,
    ):
        if "retryable" not in kwargs:
            kwargs["retryable"] = status is None or status == 429 or status >= 500
        if status is None and "category" not in kwargs:
            kwargs["category"] = ErrorCategory.NETWORK
        super().__init__(message, **kwargs)
        self.status = status
        self.body = body
        self.url = url
        self.context.http_status = status
        self.context.url = url

    def details(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.status is not None:
            result["status"] = self.status
        if self.body is not None:
            result["body"] = self.body
        if self.url is not None:
            result["url"] = self.url
        return result


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(PeeringError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    code = "CONFIG_ERROR"
    default_category = ErrorCategory.CONFIG


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "PeeringError",
    "UnknownTypeError",
    "UnsupportedOperationError",
    "MalformedIdentifierError",
    "FieldErrorCode",
    "FieldError",
    "PayloadValidationError",
    "MissingCredentialError",
    "BackendError",
    "ConfigError",
    "InvalidConfigError",
]
