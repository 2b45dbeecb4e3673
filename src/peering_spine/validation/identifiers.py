"""Resource identifier parser.

Identifiers look like::

    peeringdb://net                       collection
    peeringdb://net/694                   one instance
    peeringdb://net/search?asn__in=1,2    search
    peeringdb://net?name__contains=Hurricane

The scheme is configurable (``resource_scheme`` setting).  The object type is
checked against the registry and normalized to its registry key; the query
string goes through :func:`~peering_spine.validation.query.normalize_query`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from urllib.parse import parse_qsl, urlencode

from peering_spine.core.errors import MalformedIdentifierError
from peering_spine.registry import TypeRegistry
from peering_spine.validation.query import FilterSet, normalize_query

DEFAULT_SCHEME = "peeringdb"
SEARCH_SEGMENT = "search"


@dataclass(frozen=True)
class ResourceReference:
    """A parsed resource identifier."""

    object_type: str
    id: str | None = None
    filters: FilterSet = field(default_factory=FilterSet)
    is_search: bool = False
    scheme: str = DEFAULT_SCHEME

    @property
    def is_instance(self) -> bool:
        return self.id is not None

    def to_uri(self) -> str:
        path = f"{self.scheme}://{self.object_type}"
        if self.id is not None:
            path += f"/{self.id}"
        elif self.is_search:
            path += f"/{SEARCH_SEGMENT}"
        if self.filters:
            pairs = [
                (k, ",".join(str(v) for v in value) if isinstance(value, list) else value)
                for k, value in self.filters.items()
            ]
            path += "?" + urlencode(pairs)
        return path


def parse_identifier(
    identifier: str,
    registry: TypeRegistry,
    *,
    scheme: str = DEFAULT_SCHEME,
) -> ResourceReference:
    """Parse *identifier* into a :class:`ResourceReference`.

    Raises:
        MalformedIdentifierError: wrong scheme, no object type, or a path
            deeper than <type>/<id>.
        UnknownTypeError: the object type is not registered.
    """
    path, _, query = identifier.partition("?")
    segments = [s for s in path.split("/") if s]

    if not segments or segments[0] != f"{scheme}:":
        raise MalformedIdentifierError(
            f"Invalid resource identifier: expected {scheme}://<type>[/<id>], got {identifier!r}",
            identifier=identifier,
        )
    if len(segments) < 2:
        raise MalformedIdentifierError(
            f"Resource identifier has no object type: {identifier!r}",
            identifier=identifier,
        )
    if len(segments) > 3:
        raise MalformedIdentifierError(
            f"Resource identifier has extra path segments: {identifier!r}",
            identifier=identifier,
        )

    object_type = registry.resolve_name(segments[1])

    instance_id: str | None = None
    is_search = False
    if len(segments) > 2:
        if segments[2] == SEARCH_SEGMENT:
            is_search = True
        else:
            instance_id = segments[2]

    filters = normalize_query(parse_qsl(query, keep_blank_values=True)) if query else FilterSet()
    return ResourceReference(
        object_type=object_type,
        id=instance_id,
        filters=filters,
        is_search=is_search,
        scheme=scheme,
    )
