"""Lift weakly-typed JSON values into typed attribute trees.

Lifting is schema-driven: each declared attribute decides how its JSON
value (including ``null``) maps to an :class:`AttributeValue`.  Values with
no declared structure, like ``custom_fields`` entries, are lifted
recursively by their JSON type.
"""

from __future__ import annotations

from typing import Any, Mapping

from nautobot_provider.attributes import AttrKind, AttributeValue
from nautobot_provider.diagnostics import AttributePath
from nautobot_provider.errors import LiftError
from nautobot_provider.schema import Attribute

_ZERO = {
    AttrKind.STRING: AttributeValue.string(""),
    AttrKind.INT64: AttributeValue.int64(0),
    AttrKind.BOOL: AttributeValue.bool_(False),
}


def lift_json(value: Any, path: AttributePath) -> AttributeValue:
    """Lift an arbitrary JSON value by its own type."""
    if value is None:
        return AttributeValue.null()
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return AttributeValue.bool_(value)
    if isinstance(value, int):
        return _int64(value, path)
    if isinstance(value, float):
        return AttributeValue.float64(value)
    if isinstance(value, str):
        return AttributeValue.string(value)
    if isinstance(value, list):
        return AttributeValue.list_(lift_json(v, path.index(i)) for i, v in enumerate(value))
    if isinstance(value, dict):
        return AttributeValue.map_({str(k): lift_json(v, path.key(str(k))) for k, v in value.items()})
    raise LiftError(path, f"unsupported JSON value of type {type(value).__name__}")


def lift_value(value: Any, attribute: Attribute, path: AttributePath) -> AttributeValue:
    """Lift *value* into the shape declared by *attribute*."""
    if value is None:
        if attribute.required:
            raise LiftError(path, "required attribute is null")
        if not attribute.nullable and attribute.kind in _ZERO:
            return _ZERO[attribute.kind]
        return AttributeValue.null(attribute.kind)

    kind = attribute.kind
    if kind is AttrKind.STRING:
        if not isinstance(value, str):
            raise LiftError(path, f"expected string, got {type(value).__name__}")
        return AttributeValue.string(value)
    if kind is AttrKind.INT64:
        if isinstance(value, bool) or not isinstance(value, int):
            raise LiftError(path, f"expected integer, got {type(value).__name__}")
        return _int64(value, path)
    if kind is AttrKind.BOOL:
        if not isinstance(value, bool):
            raise LiftError(path, f"expected boolean, got {type(value).__name__}")
        return AttributeValue.bool_(value)
    if kind is AttrKind.DYNAMIC:
        return lift_json(value, path)
    if kind is AttrKind.OBJECT:
        return lift_object(value, attribute.attributes or {}, path)
    if kind is AttrKind.LIST:
        if not isinstance(value, list):
            raise LiftError(path, f"expected list, got {type(value).__name__}")
        return AttributeValue.list_(
            _lift_element(v, attribute, path.index(i)) for i, v in enumerate(value)
        )
    if kind is AttrKind.MAP:
        if not isinstance(value, dict):
            raise LiftError(path, f"expected map, got {type(value).__name__}")
        return AttributeValue.map_(
            {str(k): _lift_element(v, attribute, path.key(str(k))) for k, v in value.items()}
        )
    raise LiftError(path, f"cannot lift into {kind.value} attribute")


def lift_object(
    record: Any, attributes: Mapping[str, Attribute], path: AttributePath
) -> AttributeValue:
    """Lift a JSON object into an object value with one field per declared attribute.

    Keys the schema does not declare are dropped; declared keys missing
    from *record* lift as ``null``.
    """
    if not isinstance(record, Mapping):
        raise LiftError(path, f"expected object, got {type(record).__name__}")
    return AttributeValue.object_(
        {name: lift_value(record.get(name), attr, path.attribute(name)) for name, attr in attributes.items()}
    )


def _lift_element(value: Any, attribute: Attribute, path: AttributePath) -> AttributeValue:
    if attribute.is_nested:
        return lift_object(value, attribute.attributes, path)
    element_kind = attribute.element_kind or AttrKind.DYNAMIC
    if element_kind in (AttrKind.DYNAMIC, AttrKind.OBJECT):
        return lift_json(value, path)
    if value is None:
        return AttributeValue.null(element_kind)
    return lift_value(value, Attribute(element_kind, computed=True), path)


def _int64(value: int, path: AttributePath) -> AttributeValue:
    try:
        return AttributeValue.int64(value)
    except ValueError as exc:
        raise LiftError(path, str(exc)) from exc
