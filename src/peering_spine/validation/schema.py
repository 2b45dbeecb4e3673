"""Object schema builder.

Composes synthesized :class:`~peering_spine.validation.fields.FieldRule`
values into a full validation contract for one ``(object type, operation)``
pair and validates payloads against it.

Operation rules:

- ``create``: descriptor required fields are required, optional fields optional
- ``update``: as ``create`` plus ``id``, required
- ``patch``: ``id`` required, every other writable field optional
- ``delete``: ``id`` required, nothing else

Relationship fields never appear in a write schema.  Unknown fields are
rejected, not silently dropped.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Any, assert_never

from pydantic import BaseModel, ConfigDict, Field, create_model
from pydantic import ValidationError as PydanticValidationError

from peering_spine.core.errors import FieldError, FieldErrorCode, PayloadValidationError
from peering_spine.registry import Operation, TypeDescriptor
from peering_spine.validation.fields import FieldRule, synthesize

ID_FIELD = "id"


@dataclass(frozen=True)
class ObjectSchema:
    """Validation contract for one ``(object type, operation)`` pair."""

    type_name: str
    operation: Operation
    rules: Mapping[str, FieldRule]
    _model: type[BaseModel] = field(repr=False, compare=False, default=BaseModel)

    @property
    def required_fields(self) -> list[str]:
        return [name for name, rule in self.rules.items() if rule.required]

    @property
    def optional_fields(self) -> list[str]:
        return [name for name, rule in self.rules.items() if not rule.required]

    def model(self) -> type[BaseModel]:
        return self._model

    def json_schema(self) -> dict[str, Any]:
        return self._model.model_json_schema()

    def validate(self, payload: Any) -> dict[str, Any]:
        """Validate *payload*; return only the supplied keys, as validated."""
        if not isinstance(payload, Mapping):
            raise PayloadValidationError(
                self.type_name,
                self.operation.value,
                [FieldError("", f"Expected an object, got {type(payload).__name__}")],
            )
        try:
            instance = self._model.model_validate(dict(payload))
        except PydanticValidationError as e:
            raise PayloadValidationError(
                self.type_name,
                self.operation.value,
                _field_errors(e),
            ) from None
        return instance.model_dump(mode="python", exclude_unset=True)


def _rules_for(descriptor: TypeDescriptor, operation: Operation) -> dict[str, FieldRule]:
    rules: dict[str, FieldRule] = {}
    match operation:
        case Operation.CREATE:
            for name in descriptor.required_fields:
                rules[name] = synthesize(name, required=True)
            for name in descriptor.optional_fields:
                rules[name] = synthesize(name)
        case Operation.UPDATE:
            rules[ID_FIELD] = synthesize(ID_FIELD, required=True)
            for name in descriptor.required_fields:
                rules[name] = synthesize(name, required=True)
            for name in descriptor.optional_fields:
                rules[name] = synthesize(name)
        case Operation.PATCH:
            rules[ID_FIELD] = synthesize(ID_FIELD, required=True)
            for name in descriptor.writable_fields:
                rules[name] = synthesize(name)
        case Operation.DELETE:
            rules[ID_FIELD] = synthesize(ID_FIELD, required=True)
        case _:
            assert_never(operation)
    return rules


def _model_name(descriptor: TypeDescriptor, operation: Operation) -> str:
    base = "".join(part.capitalize() for part in descriptor.endpoint.split("_"))
    return f"{base}{operation.value.capitalize()}Payload"


@lru_cache(maxsize=256)
def build_schema(descriptor: TypeDescriptor, operation: Operation) -> ObjectSchema:
    """Build (and cache) the :class:`ObjectSchema` for *descriptor* and *operation*."""
    operation = Operation.parse(operation)
    rules = _rules_for(descriptor, operation)
    definitions: dict[str, Any] = {}
    for name, rule in rules.items():
        default = ... if rule.required else None
        definitions[name] = (rule.annotation(), Field(default, description=rule.description or None))
    model = create_model(
        _model_name(descriptor, operation),
        __config__=ConfigDict(extra="forbid"),
        **definitions,
    )
    return ObjectSchema(
        type_name=descriptor.endpoint,
        operation=operation,
        rules=MappingProxyType(rules),
        _model=model,
    )


def validate_payload(descriptor: TypeDescriptor, operation: Operation, payload: Any) -> dict[str, Any]:
    """Validate *payload* for *operation* on *descriptor*.

    Raises:
        PayloadValidationError: with the ordered per-field failures.
    """
    return build_schema(descriptor, Operation.parse(operation)).validate(payload)


def _field_errors(error: PydanticValidationError) -> list[FieldError]:
    """Translate pydantic errors into ordered, de-duplicated :class:`FieldError` records.

    Union members (identifier fields) report one error per branch; those are
    folded into a single record per field.
    """
    merged: dict[tuple[str, FieldErrorCode], list[str]] = {}
    for issue in error.errors(include_url=False):
        loc = issue.get("loc", ())
        path = str(loc[0]) if loc else ""
        match issue["type"]:
            case "missing":
                code = (
                    FieldErrorCode.MISSING_INSTANCE_ID
                    if path == ID_FIELD
                    else FieldErrorCode.MISSING_REQUIRED_FIELD
                )
                message = "Required"
            case "extra_forbidden":
                code = FieldErrorCode.UNEXPECTED_FIELD
                message = "Unexpected field"
            case _:
                code = FieldErrorCode.INVALID_FIELD_VALUE
                message = issue["msg"]
        messages = merged.setdefault((path, code), [])
        if message not in messages:
            messages.append(message)
    return [FieldError(path, "; ".join(messages), code) for (path, code), messages in merged.items()]
