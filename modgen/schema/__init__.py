"""Schema model consumed by the generator."""

from .introspection import load_schema, schema_from_introspection
from .model import (
    BUILTIN_SCALARS,
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
    VisitHandlers,
)

__all__ = [
    "BUILTIN_SCALARS",
    "EnumType",
    "EnumValue",
    "Field",
    "InputType",
    "InputValue",
    "ObjectType",
    "ScalarType",
    "Schema",
    "SchemaType",
    "TypeRef",
    "VisitHandlers",
    "load_schema",
    "schema_from_introspection",
]
