"""Build a :class:`Schema` from a GraphQL introspection document."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from .model import (
    ENUM,
    INPUT_OBJECT,
    OBJECT,
    SCALAR,
    EnumType,
    EnumValue,
    Field,
    InputType,
    InputValue,
    ObjectType,
    ScalarType,
    Schema,
    SchemaType,
    TypeRef,
)


def load_schema(path: Path) -> Schema:
    """Read an introspection JSON file from disk."""
    with path.open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    return schema_from_introspection(data)


def schema_from_introspection(data: Mapping[str, Any]) -> Schema:
    """Accept ``{"data": {"__schema": ...}}``, ``{"__schema": ...}`` or the bare schema."""
    payload: Mapping[str, Any] = data
    if isinstance(payload.get("data"), Mapping):
        payload = payload["data"]
    if isinstance(payload.get("__schema"), Mapping):
        payload = payload["__schema"]

    query_type = _as_dict(payload.get("queryType")).get("name") or "Query"
    types: List[SchemaType] = []
    for raw in payload.get("types") or []:
        item = _build_type(_as_dict(raw))
        if item is not None:
            types.append(item)
    return Schema(types=tuple(types), query_type=str(query_type))


def _build_type(raw: Dict[str, Any]) -> Optional[SchemaType]:
    kind = raw.get("kind")
    name = str(raw.get("name") or "")
    description = _description(raw)
    if kind == SCALAR:
        return ScalarType(name=name, description=description)
    if kind == OBJECT:
        fields = tuple(_build_field(_as_dict(item)) for item in raw.get("fields") or [])
        return ObjectType(name=name, fields=fields, description=description)
    if kind == ENUM:
        values = tuple(
            EnumValue(name=str(value.get("name")), description=_description(value))
            for value in (_as_dict(item) for item in raw.get("enumValues") or [])
        )
        return EnumType(name=name, values=values, description=description)
    if kind == INPUT_OBJECT:
        fields = tuple(_build_input_value(_as_dict(item)) for item in raw.get("inputFields") or [])
        return InputType(name=name, fields=fields, description=description)
    # interfaces and unions are not part of the engine API
    return None


def _build_field(raw: Dict[str, Any]) -> Field:
    return Field(
        name=str(raw.get("name")),
        type_ref=_build_type_ref(_as_dict(raw.get("type"))),
        args=tuple(_build_input_value(_as_dict(item)) for item in raw.get("args") or []),
        description=_description(raw),
        deprecation_reason=raw.get("deprecationReason") if raw.get("isDeprecated") else None,
    )


def _build_input_value(raw: Dict[str, Any]) -> InputValue:
    default = raw.get("defaultValue")
    return InputValue(
        name=str(raw.get("name")),
        type_ref=_build_type_ref(_as_dict(raw.get("type"))),
        description=_description(raw),
        default_value=str(default) if default is not None else None,
    )


def _build_type_ref(raw: Dict[str, Any]) -> TypeRef:
    of_type = raw.get("ofType")
    return TypeRef(
        kind=str(raw.get("kind")),
        name=raw.get("name"),
        of_type=_build_type_ref(_as_dict(of_type)) if of_type else None,
    )


def _description(raw: Mapping[str, Any]) -> str:
    value = raw.get("description")
    return value.strip() if isinstance(value, str) else ""


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


__all__ = ["load_schema", "schema_from_introspection"]
