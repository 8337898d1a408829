"""Attribute schema declarations.

A schema is a tree of :class:`Attribute` leaves.  Each leaf carries a
semantic kind and a disposition: ``required`` (host must supply),
``optional`` (host may supply), ``computed`` (produced by the provider).
``optional`` and ``computed`` may be combined; ``required`` stands alone.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from nautobot_provider.attributes import AttrKind


@dataclass(frozen=True)
class Attribute:
    """A single schema leaf (or nested object holder).

    Parameters
    ----------
    kind:
        Semantic type of the attribute.
    element_kind:
        Element type for ``LIST`` and ``MAP`` attributes whose elements are
        not nested objects.  ``DYNAMIC`` lets each element pick its kind
        from the JSON value.
    attributes:
        Nested attribute declarations for ``OBJECT`` attributes and for
        ``LIST``/``MAP`` attributes whose elements are objects.
    nullable:
        Whether a JSON ``null`` is published as a null value.  When
        ``False`` a null becomes the kind's zero value instead.
    """

    kind: AttrKind
    description: str = ""
    required: bool = False
    optional: bool = False
    computed: bool = False
    sensitive: bool = False
    nullable: bool = True
    element_kind: AttrKind | None = None
    attributes: Mapping[str, "Attribute"] | None = None

    def __post_init__(self) -> None:
        if not (self.required or self.optional or self.computed):
            raise ValueError("attribute must be required, optional or computed")
        if self.required and (self.optional or self.computed):
            raise ValueError("required attribute cannot also be optional or computed")
        if self.kind in (AttrKind.LIST, AttrKind.MAP) and (
            self.element_kind is None and self.attributes is None
        ):
            raise ValueError(f"{self.kind.value} attribute needs element_kind or attributes")
        if self.kind is AttrKind.OBJECT and self.attributes is None:
            raise ValueError("object attribute needs nested attributes")

    @property
    def is_nested(self) -> bool:
        return self.attributes is not None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.kind.value}
        if self.description:
            out["description"] = self.description
        for flag in ("required", "optional", "computed", "sensitive"):
            if getattr(self, flag):
                out[flag] = True
        if self.element_kind is not None:
            out["element_type"] = self.element_kind.value
        if self.attributes is not None:
            out["attributes"] = {k: v.to_dict() for k, v in self.attributes.items()}
        return out


# ----------------------------------------------------------------------
# Constructors named after the host framework's attribute types
# ----------------------------------------------------------------------


def string_attribute(description: str = "", **flags: Any) -> Attribute:
    return Attribute(AttrKind.STRING, description, **flags)


def int64_attribute(description: str = "", **flags: Any) -> Attribute:
    return Attribute(AttrKind.INT64, description, **flags)


def bool_attribute(description: str = "", **flags: Any) -> Attribute:
    return Attribute(AttrKind.BOOL, description, **flags)


def map_attribute(element_kind: AttrKind, description: str = "", **flags: Any) -> Attribute:
    return Attribute(AttrKind.MAP, description, element_kind=element_kind, **flags)


def list_nested_attribute(
    attributes: Mapping[str, Attribute], description: str = "", **flags: Any
) -> Attribute:
    return Attribute(AttrKind.LIST, description, attributes=dict(attributes), **flags)


@dataclass(frozen=True)
class Schema:
    attributes: Mapping[str, Attribute] = field(default_factory=dict)
    description: str = ""

    def __getitem__(self, name: str) -> Attribute:
        return self.attributes[name]

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "attributes": {k: v.to_dict() for k, v in self.attributes.items()},
        }
        if self.description:
            out["description"] = self.description
        return out
