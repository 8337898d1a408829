"""Tri-state attribute values handed to the host.

Every leaf the provider publishes is either **null** (explicitly absent),
**unknown** (not yet computed by the host) or **known** with a concrete
value.  The host diffs on these distinctions, so a JSON ``null`` must never
collapse into a zero value on its way through the provider.

Usage::

    name = AttributeValue.string("Acme")
    missing = AttributeValue.null(AttrKind.STRING)
    tree = AttributeValue.object_({"name": name, "display": missing})
    tree["name"].value  # -> "Acme"
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class AttrState(str, Enum):
    NULL = "null"
    UNKNOWN = "unknown"
    KNOWN = "known"


class AttrKind(str, Enum):
    """Semantic type of an attribute value."""

    STRING = "string"
    INT64 = "int64"
    FLOAT64 = "float64"
    BOOL = "bool"
    LIST = "list"
    MAP = "map"
    OBJECT = "object"
    # Weakly-typed JSON whose concrete kind is only known per value.
    DYNAMIC = "dynamic"


@dataclass(frozen=True)
class AttributeValue:
    """A single node of the typed attribute tree.

    ``value`` holds a Python scalar for scalar kinds, a tuple of
    :class:`AttributeValue` for lists, and a read-only mapping of name →
    :class:`AttributeValue` for maps and objects.  It is ``None`` whenever
    the state is not :attr:`AttrState.KNOWN`.
    """

    state: AttrState
    kind: AttrKind = AttrKind.DYNAMIC
    value: Any = None

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def null(cls, kind: AttrKind = AttrKind.DYNAMIC) -> "AttributeValue":
        return cls(AttrState.NULL, kind)

    @classmethod
    def unknown(cls, kind: AttrKind = AttrKind.DYNAMIC) -> "AttributeValue":
        return cls(AttrState.UNKNOWN, kind)

    @classmethod
    def string(cls, value: str) -> "AttributeValue":
        if not isinstance(value, str):
            raise TypeError(f"string attribute requires str, got {type(value).__name__}")
        return cls(AttrState.KNOWN, AttrKind.STRING, value)

    @classmethod
    def int64(cls, value: int) -> "AttributeValue":
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"int64 attribute requires int, got {type(value).__name__}")
        if not INT64_MIN <= value <= INT64_MAX:
            raise ValueError(f"{value} does not fit in a signed 64-bit integer")
        return cls(AttrState.KNOWN, AttrKind.INT64, value)

    @classmethod
    def float64(cls, value: float) -> "AttributeValue":
        return cls(AttrState.KNOWN, AttrKind.FLOAT64, float(value))

    @classmethod
    def bool_(cls, value: bool) -> "AttributeValue":
        if not isinstance(value, bool):
            raise TypeError(f"bool attribute requires bool, got {type(value).__name__}")
        return cls(AttrState.KNOWN, AttrKind.BOOL, value)

    @classmethod
    def list_(cls, items: Iterable["AttributeValue"]) -> "AttributeValue":
        return cls(AttrState.KNOWN, AttrKind.LIST, tuple(items))

    @classmethod
    def map_(cls, items: Mapping[str, "AttributeValue"]) -> "AttributeValue":
        return cls(AttrState.KNOWN, AttrKind.MAP, MappingProxyType(dict(items)))

    @classmethod
    def object_(cls, fields: Mapping[str, "AttributeValue"]) -> "AttributeValue":
        return cls(AttrState.KNOWN, AttrKind.OBJECT, MappingProxyType(dict(fields)))

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def is_null(self) -> bool:
        return self.state is AttrState.NULL

    @property
    def is_unknown(self) -> bool:
        return self.state is AttrState.UNKNOWN

    @property
    def is_known(self) -> bool:
        return self.state is AttrState.KNOWN

    def value_string(self) -> str:
        """Return the string value, or ``""`` when null or unknown."""
        if self.is_known and self.kind is AttrKind.STRING:
            return self.value
        return ""

    def __getitem__(self, key: str | int) -> "AttributeValue":
        if not self.is_known or self.kind not in (AttrKind.LIST, AttrKind.MAP, AttrKind.OBJECT):
            raise TypeError(f"{self.state.value} {self.kind.value} value is not subscriptable")
        return self.value[key]

    def __hash__(self) -> int:
        value = self.value
        if isinstance(value, Mapping):
            value = tuple(value.items())
        return hash((self.state, self.kind, value))

    def to_python(self) -> Any:
        """Convert a fully-known tree to plain JSON-compatible values.

        Null leaves become ``None``.  Unknown leaves have no concrete
        representation and raise :class:`ValueError`.
        """
        if self.is_unknown:
            raise ValueError("unknown value has no concrete representation")
        if self.is_null:
            return None
        if self.kind is AttrKind.LIST:
            return [item.to_python() for item in self.value]
        if self.kind in (AttrKind.MAP, AttrKind.OBJECT):
            return {k: v.to_python() for k, v in self.value.items()}
        return self.value
