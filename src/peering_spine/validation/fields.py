"""Field schema synthesizer.

Infers a validation rule from a field *name* alone, independent of the object
type it belongs to.  Rules are evaluated as an ordered table; the first
matching rule wins:

====  =====================================================  =====================
 #    match                                                  rule
====  =====================================================  =====================
 1    ``id`` or ``*_id``                                     identifier (str | int)
 2    ``asn``                                                positive integer
 3    contains ``email``                                     email string
 4    contains ``phone``                                     string
 5    contains ``url``, ``website``, ``looking_glass``       URL string
 6    ``latitude`` / ``longitude``                           bounded number
 7    ``proto_*``, ``info_*``, ``avail_*``, boolean set      boolean
 8    numeric set, ``info_prefixes*``                        non-negative integer
 9    contains ``ipaddr``, ``prefix``                        IP address or prefix
 10   enumeration set                                        fixed value set
 11   anything else                                          string
====  =====================================================  =====================

Order matters: ``tech_email_id`` is an identifier, ``info_prefixes4`` and
``info_type`` are booleans (rule 7 shadows rules 8 and 10), ``policy_url`` is
a URL.  These outcomes are part of the wire contract and must not be
"corrected" by reordering.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import (
    AfterValidator,
    AnyUrl,
    EmailStr,
    Field,
    IPvAnyInterface,
    StrictBool,
    StrictInt,
    StrictStr,
    TypeAdapter,
)
from pydantic import ValidationError as PydanticValidationError


class FieldKind(str, Enum):
    IDENTIFIER = "identifier"
    INTEGER = "integer"
    NON_NEGATIVE_INTEGER = "non_negative_integer"
    NUMBER = "number"
    STRING = "string"
    EMAIL = "email"
    URL = "url"
    IP_OR_PREFIX = "ip_or_prefix"
    BOOLEAN = "boolean"
    ENUM = "enum"


BOOLEAN_FIELDS = frozenset({"is_rs_peer", "dot1q_support", "operational"})
NUMERIC_FIELDS = frozenset({"speed", "mtu", "vlan", "rs_asn", "local_asn"})

ENUM_VALUES: dict[str, tuple[str, ...]] = {
    "role": (
        "Abuse",
        "Administrative",
        "Maintenance",
        "NOC",
        "Policy",
        "Public Relations",
        "Sales",
        "Technical",
    ),
    "visible": ("Users", "Public", "Private"),
    "status": ("ok", "pending", "deleted"),
    "info_type": (
        "Content",
        "Cable/DSL/ISP",
        "Enterprise",
        "Educational/Research",
        "Government",
        "Non-Profit",
        "Route Server",
        "Network Services",
        "Online Gaming",
    ),
    "info_scope": ("Global", "Regional", "National", "Local"),
    "policy_general": ("Open", "Selective", "Restrictive", "No"),
}

ENUM_DESCRIPTIONS = {
    "role": "Contact role",
    "visible": "Visibility level",
    "status": "Object status",
    "info_type": "Network type",
    "info_scope": "Network scope",
    "policy_general": "General peering policy",
}


@dataclass(frozen=True)
class FieldRule:
    """Validation contract for one field name."""

    name: str
    kind: FieldKind
    description: str = ""
    minimum: float | None = None
    maximum: float | None = None
    exclusive_minimum: bool = False
    choices: tuple[str, ...] = ()
    required: bool = False

    def with_required(self, required: bool) -> FieldRule:
        return self if required == self.required else replace(self, required=required)

    def annotation(self) -> Any:
        """Pydantic annotation enforcing this rule.

        Strict types throughout: numbers are never parsed from strings and
        booleans are never accepted where an integer is expected.
        """
        match self.kind:
            case FieldKind.IDENTIFIER:
                return Annotated[StrictStr, AfterValidator(_check_identifier)] | StrictInt
            case FieldKind.INTEGER | FieldKind.NON_NEGATIVE_INTEGER:
                if self.exclusive_minimum:
                    return Annotated[StrictInt, Field(gt=self.minimum)]
                return Annotated[StrictInt, Field(ge=self.minimum)]
            case FieldKind.NUMBER:
                return Annotated[float, Field(strict=True, ge=self.minimum, le=self.maximum)]
            case FieldKind.STRING:
                return StrictStr
            case FieldKind.EMAIL:
                return Annotated[StrictStr, AfterValidator(_check_email)]
            case FieldKind.URL:
                return Annotated[StrictStr, AfterValidator(_check_url)]
            case FieldKind.IP_OR_PREFIX:
                return Annotated[StrictStr, AfterValidator(_check_ip_or_prefix)]
            case FieldKind.BOOLEAN:
                return StrictBool
            case FieldKind.ENUM:
                return Literal[self.choices]
        raise AssertionError(f"Unhandled field kind: {self.kind}")

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"name": self.name, "kind": self.kind.value, "required": self.required}
        if self.description:
            d["description"] = self.description
        if self.minimum is not None:
            d["minimum"] = self.minimum
        if self.maximum is not None:
            d["maximum"] = self.maximum
        if self.choices:
            d["choices"] = list(self.choices)
        return d


_URL_ADAPTER = TypeAdapter(AnyUrl)
_EMAIL_ADAPTER = TypeAdapter(EmailStr)
_IP_ADAPTER = TypeAdapter(IPvAnyInterface)


def _check_identifier(value: str) -> str:
    if not value.strip():
        raise ValueError("Identifier must not be blank")
    return value


# Format checks return the caller's string untouched.
def _check_email(value: str) -> str:
    try:
        _EMAIL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        raise ValueError("Invalid email") from None
    return value


def _check_url(value: str) -> str:
    try:
        _URL_ADAPTER.validate_python(value)
    except PydanticValidationError:
        raise ValueError("Invalid url") from None
    return value


def _check_ip_or_prefix(value: str) -> str:
    try:
        _IP_ADAPTER.validate_python(value)
    except PydanticValidationError:
        raise ValueError("Invalid IP address or prefix") from None
    return value


# ── Rule table ───────────────────────────────────────────────────────────

_Matcher = Callable[[str], bool]
_Builder = Callable[[str], FieldRule]


def _identifier(name: str) -> FieldRule:
    label = name[:-3] if name.endswith("_id") else name
    return FieldRule(name, FieldKind.IDENTIFIER, f"{label} ID")


def _coordinate(name: str) -> FieldRule:
    bound = 90 if name == "latitude" else 180
    return FieldRule(
        name,
        FieldKind.NUMBER,
        f"{name.capitalize()} coordinate",
        minimum=-bound,
        maximum=bound,
    )


def _enumeration(name: str) -> FieldRule:
    return FieldRule(name, FieldKind.ENUM, ENUM_DESCRIPTIONS[name], choices=ENUM_VALUES[name])


_RULES: tuple[tuple[_Matcher, _Builder], ...] = (
    (
        lambda n: n == "id" or n.endswith("_id"),
        _identifier,
    ),
    (
        lambda n: n == "asn",
        lambda n: FieldRule(n, FieldKind.INTEGER, "Autonomous System Number", minimum=0, exclusive_minimum=True),
    ),
    (
        lambda n: "email" in n,
        lambda n: FieldRule(n, FieldKind.EMAIL, "Email address"),
    ),
    (
        lambda n: "phone" in n,
        lambda n: FieldRule(n, FieldKind.STRING, "Phone number"),
    ),
    (
        lambda n: "url" in n or n in ("website", "looking_glass"),
        lambda n: FieldRule(n, FieldKind.URL, "URL"),
    ),
    (
        lambda n: n in ("latitude", "longitude"),
        _coordinate,
    ),
    (
        lambda n: n.startswith(("proto_", "info_", "avail_")) or n in BOOLEAN_FIELDS,
        lambda n: FieldRule(n, FieldKind.BOOLEAN, f"{n} flag"),
    ),
    (
        lambda n: n in NUMERIC_FIELDS or n.startswith("info_prefixes"),
        lambda n: FieldRule(n, FieldKind.NON_NEGATIVE_INTEGER, n, minimum=0),
    ),
    (
        lambda n: "ipaddr" in n or n == "prefix",
        lambda n: FieldRule(n, FieldKind.IP_OR_PREFIX, "IP address or prefix"),
    ),
    (
        lambda n: n in ENUM_VALUES,
        _enumeration,
    ),
)


def synthesize(field_name: str, required: bool = False) -> FieldRule:
    """Return the :class:`FieldRule` for *field_name*."""
    for matches, build in _RULES:
        if matches(field_name):
            return build(field_name).with_required(required)
    return FieldRule(field_name, FieldKind.STRING, field_name, required=required)
