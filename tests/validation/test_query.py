"""Tests for query filter normalization."""

from __future__ import annotations

import pytest

from peering_spine.validation.query import FilterSet, QueryKeyKind, classify_key, normalize_query


class TestClassifyKey:
    @pytest.mark.parametrize("key", ["limit", "skip", "depth", "fields", "since"])
    def test_standard(self, key):
        assert classify_key(key).kind is QueryKeyKind.STANDARD

    def test_modifier(self):
        parsed = classify_key("name__contains")
        assert parsed.kind is QueryKeyKind.MODIFIER
        assert parsed.field == "name"
        assert parsed.modifier == "contains"

    def test_modifier_on_underscored_field(self):
        parsed = classify_key("info_prefixes4__gte")
        assert parsed.field == "info_prefixes4"
        assert parsed.modifier == "gte"

    @pytest.mark.parametrize("key", ["asn", "asn__bogus", "__in", "name__"])
    def test_exact(self, key):
        assert classify_key(key).kind is QueryKeyKind.EXACT


class TestNormalizeQuery:
    def test_integer_params_coerced(self):
        assert normalize_query({"limit": "5", "skip": "10", "depth": "2", "since": "1700000000"}) == {
            "limit": 5,
            "skip": 10,
            "depth": 2,
            "since": 1700000000,
        }

    def test_non_numeric_integer_param_passes_through(self):
        assert normalize_query({"limit": "many"}) == {"limit": "many"}

    def test_fields_kept_as_string(self):
        assert normalize_query({"fields": "id,name"}) == {"fields": "id,name"}

    def test_modifier_value_not_coerced(self):
        assert normalize_query({"asn__gte": "10"}) == {"asn__gte": "10"}

    def test_in_splits_and_trims(self):
        assert normalize_query({"asn__in": "694, 3356 ,6939"}) == {"asn__in": ["694", "3356", "6939"]}

    def test_in_list_kept(self):
        assert normalize_query({"asn__in": [694, 3356]}) == {"asn__in": [694, 3356]}

    def test_unknown_modifier_does_not_raise(self):
        assert normalize_query({"asn__bogus": "10"}) == {"asn__bogus": "10"}

    def test_exact_filter(self):
        assert normalize_query({"name": "Acme Networks", "country": "US"}) == {
            "name": "Acme Networks",
            "country": "US",
        }

    def test_preserves_input_order(self):
        filters = normalize_query([("name", "x"), ("limit", "1"), ("asn__lt", "5")])
        assert list(filters) == ["name", "limit", "asn__lt"]

    def test_none_and_empty(self):
        assert normalize_query(None) == {}
        assert normalize_query({}) == {}

    def test_returns_filter_set_views(self):
        filters = normalize_query({"limit": "5", "name__startswith": "Acme", "country": "NL"})
        assert isinstance(filters, FilterSet)
        assert filters.standard() == {"limit": 5}
        assert filters.modifiers() == {"name__startswith": "Acme"}
        assert filters.exact() == {"country": "NL"}
