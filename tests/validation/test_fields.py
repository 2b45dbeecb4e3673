"""Tests for field rule synthesis: rule precedence and the annotations it produces."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from peering_spine.validation.fields import ENUM_VALUES, FieldKind, synthesize


def _adapter(field_name: str) -> TypeAdapter:
    return TypeAdapter(synthesize(field_name).annotation())


# ── Rule precedence ──────────────────────────────────────────────────────


class TestRulePrecedence:
    @pytest.mark.parametrize(
        "field_name,kind",
        [
            ("id", FieldKind.IDENTIFIER),
            ("org_id", FieldKind.IDENTIFIER),
            ("tech_email_id", FieldKind.IDENTIFIER),
            ("asn", FieldKind.INTEGER),
            ("tech_email", FieldKind.EMAIL),
            ("email", FieldKind.EMAIL),
            ("policy_phone", FieldKind.STRING),
            ("website", FieldKind.URL),
            ("url_stats", FieldKind.URL),
            ("looking_glass", FieldKind.URL),
            ("policy_url", FieldKind.URL),
            ("latitude", FieldKind.NUMBER),
            ("longitude", FieldKind.NUMBER),
            ("proto_ipv6", FieldKind.BOOLEAN),
            ("avail_ethernet", FieldKind.BOOLEAN),
            ("is_rs_peer", FieldKind.BOOLEAN),
            ("dot1q_support", FieldKind.BOOLEAN),
            ("operational", FieldKind.BOOLEAN),
            ("speed", FieldKind.NON_NEGATIVE_INTEGER),
            ("mtu", FieldKind.NON_NEGATIVE_INTEGER),
            ("rs_asn", FieldKind.NON_NEGATIVE_INTEGER),
            ("local_asn", FieldKind.NON_NEGATIVE_INTEGER),
            ("ipaddr4", FieldKind.IP_OR_PREFIX),
            ("prefix", FieldKind.IP_OR_PREFIX),
            ("role", FieldKind.ENUM),
            ("visible", FieldKind.ENUM),
            ("status", FieldKind.ENUM),
            ("policy_general", FieldKind.ENUM),
            ("name", FieldKind.STRING),
            ("irr_as_set", FieldKind.STRING),
        ],
    )
    def test_kind(self, field_name, kind):
        assert synthesize(field_name).kind is kind

    def test_info_prefixes_is_boolean_not_integer(self):
        assert synthesize("info_prefixes4").kind is FieldKind.BOOLEAN
        assert synthesize("info_prefixes6").kind is FieldKind.BOOLEAN

    def test_info_enumerations_are_boolean(self):
        assert synthesize("info_type").kind is FieldKind.BOOLEAN
        assert synthesize("info_scope").kind is FieldKind.BOOLEAN

    def test_required_flag(self):
        assert synthesize("name").required is False
        assert synthesize("name", required=True).required is True

    def test_deterministic(self):
        assert synthesize("tech_email") == synthesize("tech_email")

    def test_enum_values(self):
        rule = synthesize("role")
        assert rule.choices == ENUM_VALUES["role"]
        assert len(rule.choices) == 8
        assert synthesize("policy_general").choices == ("Open", "Selective", "Restrictive", "No")

    def test_coordinate_bounds(self):
        lat = synthesize("latitude")
        lon = synthesize("longitude")
        assert (lat.minimum, lat.maximum) == (-90, 90)
        assert (lon.minimum, lon.maximum) == (-180, 180)

    def test_to_dict(self):
        d = synthesize("visible", required=True).to_dict()
        assert d["kind"] == "enum"
        assert d["required"] is True
        assert d["choices"] == ["Users", "Public", "Private"]


# ── Annotations ──────────────────────────────────────────────────────────


class TestAnnotations:
    def test_identifier_accepts_str_and_int(self):
        adapter = _adapter("org_id")
        assert adapter.validate_python(42) == 42
        assert adapter.validate_python("42") == "42"
        with pytest.raises(ValidationError):
            adapter.validate_python(4.2)

    @pytest.mark.parametrize("value", ["", "   ", "\t"])
    def test_identifier_rejects_blank(self, value):
        with pytest.raises(ValidationError):
            _adapter("id").validate_python(value)

    def test_asn_must_be_positive_integer(self):
        adapter = _adapter("asn")
        assert adapter.validate_python(64500) == 64500
        for bad in (0, -1, "64500", True, 1.5):
            with pytest.raises(ValidationError):
                adapter.validate_python(bad)

    def test_non_negative_integer(self):
        adapter = _adapter("speed")
        assert adapter.validate_python(0) == 0
        assert adapter.validate_python(10000) == 10000
        with pytest.raises(ValidationError):
            adapter.validate_python(-1)

    def test_coordinates(self):
        adapter = _adapter("latitude")
        assert adapter.validate_python(45.5) == 45.5
        assert adapter.validate_python(-90.0) == -90.0
        for bad in (90.5, -91.0, "45.5"):
            with pytest.raises(ValidationError):
                adapter.validate_python(bad)

    def test_email(self):
        adapter = _adapter("tech_email")
        assert adapter.validate_python("noc@acme-networks.net") == "noc@acme-networks.net"
        with pytest.raises(ValidationError):
            adapter.validate_python("not-an-email")

    def test_email_value_is_not_normalized(self):
        assert _adapter("tech_email").validate_python("NOC@ACME-NETWORKS.NET") == "NOC@ACME-NETWORKS.NET"

    def test_url(self):
        adapter = _adapter("website")
        assert adapter.validate_python("https://www.acme-networks.net") == "https://www.acme-networks.net"
        with pytest.raises(ValidationError):
            adapter.validate_python("not a url")

    @pytest.mark.parametrize("value", ["192.0.2.1", "2001:db8::1", "192.0.2.0/24", "2001:db8::/32"])
    def test_ip_or_prefix_accepts(self, value):
        assert _adapter("prefix").validate_python(value) == value

    @pytest.mark.parametrize("value", ["999.1.1.1", "peering-lan", "192.0.2.0/33"])
    def test_ip_or_prefix_rejects(self, value):
        with pytest.raises(ValidationError):
            _adapter("ipaddr4").validate_python(value)

    def test_boolean_is_strict(self):
        adapter = _adapter("is_rs_peer")
        assert adapter.validate_python(True) is True
        for bad in ("true", 1):
            with pytest.raises(ValidationError):
                adapter.validate_python(bad)

    def test_enum(self):
        adapter = _adapter("role")
        assert adapter.validate_python("NOC") == "NOC"
        with pytest.raises(ValidationError):
            adapter.validate_python("noc")

    def test_string_rejects_numbers(self):
        with pytest.raises(ValidationError):
            _adapter("name").validate_python(42)
