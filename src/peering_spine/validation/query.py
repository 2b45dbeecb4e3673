"""Query parameter normalizer.

Classifies each incoming filter key and normalizes its value.  Three kinds of
key are recognised:

``standard``
    ``limit``, ``skip``, ``depth``, ``fields``, ``since``.  ``limit``,
    ``skip``, ``depth`` and ``since`` become integers when the raw value
    parses as one.

``modifier``
    ``<field>__<modifier>`` where the modifier is one of ``contains``,
    ``startswith``, ``lt``, ``lte``, ``gt``, ``gte``, ``in``.  Values are
    kept verbatim, except ``__in`` strings, which are split on commas.

``exact``
    Everything else, passed through as an exact-match filter.

The contract is permissive.  ``normalize_query`` never raises: unknown
modifiers (``asn__bogus``) are treated as exact filters with the literal
key, and values that do not parse as integers are passed through unchanged.
Rejecting a filter is left to the backend, which knows the real field set.

Examples:
    >>> normalize_query({"limit": "5", "name__contains": "Equinix"})
    {'limit': 5, 'name__contains': 'Equinix'}
    >>> normalize_query({"asn__in": "1, 2,3"})
    {'asn__in': ['1', '2', '3']}
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from peering_spine.registry import QUERY_MODIFIERS, QUERY_PARAMS

INTEGER_PARAMS = frozenset({"limit", "skip", "depth", "since"})
MODIFIER_SEPARATOR = "__"


class QueryKeyKind(str, Enum):
    STANDARD = "standard"
    MODIFIER = "modifier"
    EXACT = "exact"


@dataclass(frozen=True, slots=True)
class QueryKey:
    """Classification of one filter key."""

    key: str
    kind: QueryKeyKind
    field: str
    modifier: str | None = None


def classify_key(key: str) -> QueryKey:
    if key in QUERY_PARAMS:
        return QueryKey(key, QueryKeyKind.STANDARD, key)
    field_name, sep, modifier = key.rpartition(MODIFIER_SEPARATOR)
    if sep and field_name and modifier in QUERY_MODIFIERS:
        return QueryKey(key, QueryKeyKind.MODIFIER, field_name, modifier)
    return QueryKey(key, QueryKeyKind.EXACT, key)


class FilterSet(dict[str, Any]):
    """Normalized filters, in input order."""

    def _of_kind(self, kind: QueryKeyKind) -> dict[str, Any]:
        return {k: v for k, v in self.items() if classify_key(k).kind is kind}

    def standard(self) -> dict[str, Any]:
        return self._of_kind(QueryKeyKind.STANDARD)

    def modifiers(self) -> dict[str, Any]:
        return self._of_kind(QueryKeyKind.MODIFIER)

    def exact(self) -> dict[str, Any]:
        return self._of_kind(QueryKeyKind.EXACT)


def _as_int(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return value
    return value


def _split_in(value: Any) -> Any:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",")]
    return value


def normalize_query(raw: Mapping[str, Any] | Iterable[tuple[str, Any]] | None) -> FilterSet:
    """Normalize *raw* filters into a :class:`FilterSet`.

    Accepts a mapping or a sequence of ``(key, value)`` pairs.  A repeated
    key keeps its last value.
    """
    filters = FilterSet()
    if raw is None:
        return filters
    pairs = raw.items() if isinstance(raw, Mapping) else raw
    for key, value in pairs:
        key = str(key)
        parsed = classify_key(key)
        match parsed.kind:
            case QueryKeyKind.STANDARD:
                filters[key] = _as_int(value) if key in INTEGER_PARAMS else value
            case QueryKeyKind.MODIFIER:
                filters[key] = _split_in(value) if parsed.modifier == "in" else value
            case QueryKeyKind.EXACT:
                filters[key] = value
    return filters
