"""Payload, query and identifier validation."""

from peering_spine.validation.fields import FieldKind, FieldRule, synthesize
from peering_spine.validation.identifiers import ResourceReference, parse_identifier
from peering_spine.validation.query import FilterSet, QueryKey, QueryKeyKind, classify_key, normalize_query
from peering_spine.validation.schema import ObjectSchema, build_schema, validate_payload

__all__ = [
    "FieldKind",
    "FieldRule",
    "FilterSet",
    "ObjectSchema",
    "QueryKey",
    "QueryKeyKind",
    "ResourceReference",
    "build_schema",
    "classify_key",
    "normalize_query",
    "parse_identifier",
    "synthesize",
    "validate_payload",
]
