"""Object type registry.

Manifesto:
    The engine knows nothing about organizations, facilities or exchange
    points.  Everything it validates and routes is driven by one immutable
    table of :class:`TypeDescriptor` values, built once at process start and
    handed by reference to every component that needs it.

Architecture::

    DEFAULT_OBJECTS (static config) ──┐
    registry_file (YAML, optional) ───┼─► TypeRegistry.from_config()
                                      │        │
                                      │        ├── lookup(type) -> TypeDescriptor
                                      │        ├── list_types()
                                      │        └── supports(type, operation)
                                      ▼
                       schema builder · identifier parser · dispatcher

Type names are matched case-insensitively.  The registry never changes after
construction: descriptors are frozen dataclasses and the mapping is exposed
through a read-only proxy.

Tags:
    peering-spine, registry, descriptors, configuration

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from peering_spine.core.errors import InvalidConfigError, UnknownTypeError
from peering_spine.core.logging import get_logger

logger = get_logger(__name__)


class Operation(str, Enum):
    """Write operations the engine can route to the backend."""

    CREATE = "create"
    UPDATE = "update"
    PATCH = "patch"
    DELETE = "delete"

    @property
    def http_method(self) -> str:
        return _HTTP_METHODS[self]

    @property
    def requires_instance_id(self) -> bool:
        return self is not Operation.CREATE

    @classmethod
    def parse(cls, value: str | Operation) -> Operation:
        """Accept an operation tag (``patch``) or its HTTP verb (``PATCH``)."""
        if isinstance(value, Operation):
            return value
        key = str(value).strip().lower()
        for op in cls:
            if key in (op.value, op.http_method.lower()):
                return op
        if key == "full-update":
            return cls.UPDATE
        if key == "partial-update":
            return cls.PATCH
        raise ValueError(f"Unknown operation: {value!r}")


_HTTP_METHODS = {
    Operation.CREATE: "POST",
    Operation.UPDATE: "PUT",
    Operation.PATCH: "PATCH",
    Operation.DELETE: "DELETE",
}

ALL_OPERATIONS = frozenset(Operation)

QUERY_PARAMS = ("limit", "skip", "depth", "fields", "since")
QUERY_MODIFIERS = ("contains", "startswith", "lt", "lte", "gt", "gte", "in")


@dataclass(frozen=True)
class TypeDescriptor:
    """Shape and operation contract for one object type."""

    endpoint: str
    name: str
    description: str = ""
    required_fields: tuple[str, ...] = ()
    optional_fields: tuple[str, ...] = ()
    relationships: tuple[str, ...] = ()
    allowed_operations: frozenset[Operation] = field(default=ALL_OPERATIONS)

    @property
    def writable_fields(self) -> tuple[str, ...]:
        """Required then optional fields, in configuration order."""
        return self.required_fields + self.optional_fields

    def supports(self, operation: Operation | str) -> bool:
        return Operation.parse(operation) in self.allowed_operations

    def to_dict(self) -> dict[str, Any]:
        return {
            "endpoint": self.endpoint,
            "name": self.name,
            "description": self.description,
            "required_fields": list(self.required_fields),
            "optional_fields": list(self.optional_fields),
            "relationships": list(self.relationships),
            "allowed_operations": [op.value for op in Operation if op in self.allowed_operations],
        }


def _config_value(entry: Mapping[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    if snake in entry:
        return entry[snake]
    return entry.get(camel, default)


def descriptor_from_config(type_name: str, entry: Mapping[str, Any]) -> TypeDescriptor:
    """Build a :class:`TypeDescriptor` from one static configuration entry.

    Accepts snake_case or camelCase keys.  Operations may be tags
    (``create``) or HTTP verbs (``POST``).  A field listed as both required
    and optional is kept as required only; a relationship listed as a
    writable field is dropped from the writable lists.
    """
    required = tuple(_config_value(entry, "required_fields", "requiredFields", ()))
    optional = tuple(_config_value(entry, "optional_fields", "optionalFields", ()))
    relationships = tuple(entry.get("relationships", ()))

    conflicts = [f for f in optional if f in required]
    if conflicts:
        logger.warning("registry.field_conflict", type_name=type_name, fields=conflicts, kept_as="required")
        optional = tuple(f for f in optional if f not in required)

    rel_writable = [f for f in required + optional if f in relationships]
    if rel_writable:
        logger.warning("registry.relationship_writable", type_name=type_name, fields=rel_writable)
        required = tuple(f for f in required if f not in relationships)
        optional = tuple(f for f in optional if f not in relationships)

    raw_ops = _config_value(entry, "allowed_operations", "allowedOperations")
    if raw_ops is None:
        raw_ops = entry.get("writeOperations", [op.value for op in Operation])
    operations = set()
    for raw in raw_ops:
        try:
            operations.add(Operation.parse(raw))
        except ValueError as e:
            raise InvalidConfigError(f"{type_name}.allowed_operations", raw) from e

    endpoint = entry.get("endpoint") or type_name
    return TypeDescriptor(
        endpoint=endpoint,
        name=entry.get("name", endpoint),
        description=entry.get("description", ""),
        required_fields=required,
        optional_fields=optional,
        relationships=relationships,
        allowed_operations=frozenset(operations),
    )


class TypeRegistry:
    """Immutable mapping of object type name to :class:`TypeDescriptor`."""

    __slots__ = ("_descriptors",)

    def __init__(self, descriptors: Mapping[str, TypeDescriptor]):
        self._descriptors = MappingProxyType({k.lower(): v for k, v in descriptors.items()})

    @classmethod
    def from_config(cls, config: Mapping[str, Mapping[str, Any]]) -> TypeRegistry:
        registry = cls({name: descriptor_from_config(name, entry) for name, entry in config.items()})
        logger.debug("registry.loaded", types=len(registry))
        return registry

    @classmethod
    def from_yaml(cls, path: str | Path) -> TypeRegistry:
        """Load a registry from a YAML mapping of type name to entry."""
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        if not isinstance(data, Mapping):
            raise InvalidConfigError("registry_file", str(path), f"Registry file {path} must contain a mapping")
        objects = data.get("objects", data)
        return cls.from_config(objects)

    # ── Lookup ───────────────────────────────────────────────────────

    def get(self, type_name: str) -> TypeDescriptor | None:
        return self._descriptors.get(type_name.lower())

    def lookup(self, type_name: str) -> TypeDescriptor:
        """Return the descriptor for *type_name* or raise :class:`UnknownTypeError`."""
        descriptor = self.get(type_name)
        if descriptor is None:
            raise UnknownTypeError(type_name, known=self.list_types())
        return descriptor

    def resolve_name(self, type_name: str) -> str:
        """Return the registry key for *type_name* (raises if unknown)."""
        self.lookup(type_name)
        return type_name.lower()

    def list_types(self) -> list[str]:
        return list(self._descriptors)

    def supports(self, type_name: str, operation: Operation | str) -> bool:
        descriptor = self.get(type_name)
        return descriptor is not None and descriptor.supports(operation)

    def items(self) -> Iterable[tuple[str, TypeDescriptor]]:
        return self._descriptors.items()

    def __contains__(self, type_name: object) -> bool:
        return isinstance(type_name, str) and type_name.lower() in self._descriptors

    def __iter__(self) -> Iterator[str]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def __repr__(self) -> str:
        return f"TypeRegistry({', '.join(self._descriptors)})"


# =============================================================================
# Built-in PeeringDB object types
# =============================================================================

DEFAULT_OBJECTS: Mapping[str, Mapping[str, Any]] = MappingProxyType(
    {
        "org": {
            "endpoint": "org",
            "name": "Organization",
            "description": "Organizations in PeeringDB",
            "required_fields": ["name"],
            "optional_fields": [
                "website", "notes", "address1", "address2", "city", "state",
                "zipcode", "country", "latitude", "longitude", "phone", "email",
            ],
            "relationships": ["net_set", "fac_set", "ix_set"],
        },
        "fac": {
            "endpoint": "fac",
            "name": "Facility",
            "description": "Colocation facilities and data centers",
            "required_fields": ["name", "org_id"],
            "optional_fields": [
                "website", "clli", "rencode", "npanxx", "notes", "address1",
                "address2", "city", "state", "zipcode", "country", "latitude",
                "longitude", "region_continent", "tech_email", "tech_phone",
                "sales_email", "sales_phone",
            ],
            "relationships": ["netfac_set", "ixfac_set"],
        },
        "ix": {
            "endpoint": "ix",
            "name": "Internet Exchange",
            "description": "Internet Exchange Points",
            "required_fields": ["name", "org_id"],
            "optional_fields": [
                "name_long", "city", "country", "region_continent", "media",
                "notes", "proto_unicast", "proto_multicast", "proto_ipv6",
                "website", "url_stats", "tech_email", "tech_phone", "policy_email",
                "policy_phone", "sales_email", "sales_phone",
            ],
            "relationships": ["ixlan_set", "ixfac_set", "netixlan_set"],
        },
        "net": {
            "endpoint": "net",
            "name": "Network",
            "description": "Autonomous Systems and Networks",
            "required_fields": ["name", "org_id", "asn"],
            "optional_fields": [
                "aka", "name_long", "website", "irr_as_set", "looking_glass",
                "route_server", "notes", "notes_private", "info_type", "info_prefixes4",
                "info_prefixes6", "info_traffic", "info_ratio", "info_scope",
                "info_unicast", "info_multicast", "info_ipv6", "policy_url",
                "policy_general", "policy_locations", "policy_ratio", "policy_contracts",
            ],
            "relationships": ["netfac_set", "netixlan_set", "poc_set"],
        },
        "poc": {
            "endpoint": "poc",
            "name": "Point of Contact",
            "description": "Contact information for networks",
            "required_fields": ["net_id", "role", "name", "email"],
            "optional_fields": ["phone", "url", "visible"],
            "relationships": [],
        },
        "ixlan": {
            "endpoint": "ixlan",
            "name": "IX LAN",
            "description": "Internet Exchange LAN details",
            "required_fields": ["ix_id", "name"],
            "optional_fields": ["descr", "mtu", "vlan", "dot1q_support", "rs_asn"],
            "relationships": ["ixpfx_set", "netixlan_set"],
        },
        "ixpfx": {
            "endpoint": "ixpfx",
            "name": "IX Prefix",
            "description": "IP prefixes announced at Internet Exchanges",
            "required_fields": ["ixlan_id", "prefix"],
            "optional_fields": ["protocol"],
            "relationships": [],
        },
        "netixlan": {
            "endpoint": "netixlan",
            "name": "Network IX LAN",
            "description": "Network connections to Internet Exchange LANs",
            "required_fields": ["net_id", "ixlan_id"],
            "optional_fields": ["ipaddr4", "ipaddr6", "is_rs_peer", "speed", "asn", "operational"],
            "relationships": [],
        },
        "netfac": {
            "endpoint": "netfac",
            "name": "Network Facility",
            "description": "Network presence at facilities",
            "required_fields": ["net_id", "fac_id"],
            "optional_fields": ["local_asn", "avail_sonet", "avail_ethernet", "avail_atm"],
            "relationships": [],
        },
    }
)


def default_registry() -> TypeRegistry:
    """Build a registry from the built-in PeeringDB object types."""
    return TypeRegistry.from_config(DEFAULT_OBJECTS)


def load_registry(path: str | Path | None = None) -> TypeRegistry:
    """Load the registry from *path* when given, else the built-in table."""
    if path is None:
        return default_registry()
    logger.info("registry.load_file", path=str(path))
    return TypeRegistry.from_yaml(path)
