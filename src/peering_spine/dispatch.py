"""
Operation dispatcher.

Single entry point for one write (or read) against the backend:

::

    type name ──► registry.lookup ──► supports? ──► validate_payload ──► backend call
                    UnknownType        Unsupported    PayloadValidation     BackendError
                                       Operation                            MissingCredential

Validation always happens before I/O: a rejected call never reaches the
backend.  Exactly one backend call is made per accepted operation and it is
never retried.

:meth:`OperationDispatcher.execute` raises the typed engine errors;
:meth:`OperationDispatcher.dispatch` returns an :class:`OperationResult`
instead, so tool and bulk callers never have to catch anything.
"""

from __future__ import annotations

from typing import Any, assert_never

from peering_spine.client import Backend
from peering_spine.core.errors import ErrorCategory, PeeringError, UnsupportedOperationError
from peering_spine.core.logging import get_logger
from peering_spine.core.result import OperationResult, start_timer
from peering_spine.registry import Operation, TypeRegistry
from peering_spine.validation.identifiers import DEFAULT_SCHEME, ResourceReference, parse_identifier
from peering_spine.validation.schema import ID_FIELD, validate_payload

logger = get_logger(__name__)

_BACKEND_CATEGORIES = frozenset({ErrorCategory.SOURCE, ErrorCategory.NETWORK, ErrorCategory.AUTH})


class OperationDispatcher:
    """Validate and route operations for registered object types."""

    def __init__(self, registry: TypeRegistry, backend: Backend, *, scheme: str = DEFAULT_SCHEME):
        self.registry = registry
        self.backend = backend
        self.scheme = scheme

    async def execute(self, type_name: str, operation: Operation | str, payload: Any) -> Any:
        """Validate *payload* and perform *operation*; return the backend response.

        Raises:
            UnknownTypeError: *type_name* is not registered.
            UnsupportedOperationError: the type does not allow *operation*.
            PayloadValidationError: *payload* fails the object schema.
            MissingCredentialError: write attempted without an API key.
            BackendError: the backend rejected the call or was unreachable.
        """
        operation = Operation.parse(operation)
        descriptor = self.registry.lookup(type_name)
        if not descriptor.supports(operation):
            raise UnsupportedOperationError(descriptor.endpoint, operation.value)

        validated = validate_payload(descriptor, operation, payload)
        endpoint = descriptor.endpoint

        match operation:
            case Operation.CREATE:
                return await self.backend.create(endpoint, validated)
            case Operation.UPDATE:
                instance_id, body = _split_id(validated)
                return await self.backend.full_update(endpoint, instance_id, body)
            case Operation.PATCH:
                instance_id, body = _split_id(validated)
                return await self.backend.partial_update(endpoint, instance_id, body)
            case Operation.DELETE:
                instance_id, _ = _split_id(validated)
                return await self.backend.delete(endpoint, instance_id)
            case _:
                assert_never(operation)

    async def dispatch(
        self,
        type_name: str,
        operation: Operation | str,
        payload: Any,
    ) -> OperationResult[Any]:
        """Like :meth:`execute`, but engine errors become a failed result."""
        timer = start_timer()
        op_name = operation.value if isinstance(operation, Operation) else str(operation)
        log = logger.bind(object_type=type_name, operation=op_name)
        log.debug("dispatch.start")

        try:
            operation = Operation.parse(operation)
        except ValueError as exc:
            log.warning("dispatch.rejected", code="UNKNOWN_OPERATION", error=str(exc))
            return OperationResult.fail("UNKNOWN_OPERATION", str(exc), elapsed_ms=timer.elapsed_ms)

        try:
            response = await self.execute(type_name, operation, payload)
        except PeeringError as exc:
            exc.with_context(object_type=type_name, operation=op_name)
            if isinstance(payload, dict) and ID_FIELD in payload:
                exc.with_context(instance_id=payload[ID_FIELD])
            event = "dispatch.backend_error" if exc.category in _BACKEND_CATEGORIES else "dispatch.rejected"
            log.warning(event, code=exc.code, error=exc.message)
            return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)

        log.info("dispatch.complete", elapsed_ms=round(timer.elapsed_ms, 2))
        return OperationResult.ok(response, elapsed_ms=timer.elapsed_ms)

    # ── Reads ────────────────────────────────────────────────────────

    async def fetch(self, reference: ResourceReference) -> OperationResult[Any]:
        """Read the collection, search or instance named by *reference*."""
        timer = start_timer()
        try:
            descriptor = self.registry.lookup(reference.object_type)
            params = dict(reference.filters) or None
            if reference.id is not None:
                data = await self.backend.get_by_id(descriptor.endpoint, reference.id, params)
            else:
                data = await self.backend.get(descriptor.endpoint, params)
        except PeeringError as exc:
            exc.with_context(object_type=reference.object_type, instance_id=reference.id)
            logger.warning("dispatch.fetch_failed", uri=reference.to_uri(), code=exc.code, error=exc.message)
            return OperationResult.from_error(exc, elapsed_ms=timer.elapsed_ms)
        return OperationResult.ok(data, elapsed_ms=timer.elapsed_ms, metadata={"uri": reference.to_uri()})

    async def fetch_uri(self, identifier: str) -> OperationResult[Any]:
        """Parse *identifier* and :meth:`fetch` it."""
        try:
            reference = parse_identifier(identifier, self.registry, scheme=self.scheme)
        except PeeringError as exc:
            logger.warning("dispatch.rejected", uri=identifier, code=exc.code, error=exc.message)
            return OperationResult.from_error(exc)
        return await self.fetch(reference)


def _split_id(validated: dict[str, Any]) -> tuple[str | int, dict[str, Any]]:
    body = dict(validated)
    instance_id = body.pop(ID_FIELD)
    return instance_id, body
