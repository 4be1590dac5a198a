"""Read-only model of an introspected engine API schema."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, Optional, Tuple, Union, assert_never

# GraphQL scalars every schema carries; generated code maps them to Python builtins.
BUILTIN_SCALARS = ("String", "Int", "Float", "Boolean", "ID")

LIST = "LIST"
NON_NULL = "NON_NULL"
SCALAR = "SCALAR"
OBJECT = "OBJECT"
ENUM = "ENUM"
INPUT_OBJECT = "INPUT_OBJECT"


@dataclass(frozen=True)
class TypeRef:
    """Reference to a named type, possibly wrapped in LIST / NON_NULL."""

    kind: str
    name: Optional[str] = None
    of_type: Optional["TypeRef"] = None

    @property
    def is_non_null(self) -> bool:
        return self.kind == NON_NULL

    @property
    def is_list(self) -> bool:
        return self.unwrap_non_null().kind == LIST

    def unwrap_non_null(self) -> "TypeRef":
        if self.kind == NON_NULL and self.of_type is not None:
            return self.of_type
        return self

    def named(self) -> "TypeRef":
        """Return the innermost named reference."""
        ref = self
        while ref.of_type is not None:
            ref = ref.of_type
        return ref


@dataclass(frozen=True)
class InputValue:
    """An argument of a field or a field of an input type."""

    name: str
    type_ref: TypeRef
    description: str = ""
    default_value: Optional[str] = None

    @property
    def is_optional(self) -> bool:
        return not self.type_ref.is_non_null or self.default_value is not None


@dataclass(frozen=True)
class Field:
    """A field of an object type."""

    name: str
    type_ref: TypeRef
    args: Tuple[InputValue, ...] = ()
    description: str = ""
    deprecation_reason: Optional[str] = None


@dataclass(frozen=True)
class EnumValue:
    name: str
    description: str = ""


@dataclass(frozen=True)
class ScalarType:
    name: str
    description: str = ""


@dataclass(frozen=True)
class ObjectType:
    name: str
    fields: Tuple[Field, ...] = ()
    description: str = ""

    def field(self, name: str) -> Optional[Field]:
        for candidate in self.fields:
            if candidate.name == name:
                return candidate
        return None


@dataclass(frozen=True)
class EnumType:
    name: str
    values: Tuple[EnumValue, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class InputType:
    name: str
    fields: Tuple[InputValue, ...] = ()
    description: str = ""


SchemaType = Union[ScalarType, ObjectType, EnumType, InputType]


@dataclass(frozen=True)
class VisitHandlers:
    """Callbacks invoked by :meth:`Schema.visit`, one per type kind."""

    scalar: Callable[[ScalarType], None]
    object: Callable[[ObjectType], None]
    enum: Callable[[EnumType], None]
    input: Callable[[InputType], None]


@dataclass(frozen=True)
class Schema:
    """Collection of types plus the name of the root query type."""

    types: Tuple[SchemaType, ...]
    query_type: str = "Query"
    _index: Dict[str, SchemaType] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_index", {item.name: item for item in self.types})

    def get(self, name: str) -> Optional[SchemaType]:
        return self._index.get(name)

    def kind_of(self, name: str) -> Optional[str]:
        """Return the GraphQL kind of ``name``, including built-in scalars."""
        if name in BUILTIN_SCALARS:
            return SCALAR
        item = self._index.get(name)
        if item is None:
            return None
        return _kind(item)

    @property
    def scalars(self) -> Tuple[ScalarType, ...]:
        return tuple(item for item in self._visitable() if isinstance(item, ScalarType))

    @property
    def objects(self) -> Tuple[ObjectType, ...]:
        return tuple(item for item in self._visitable() if isinstance(item, ObjectType))

    @property
    def enums(self) -> Tuple[EnumType, ...]:
        return tuple(item for item in self._visitable() if isinstance(item, EnumType))

    @property
    def inputs(self) -> Tuple[InputType, ...]:
        return tuple(item for item in self._visitable() if isinstance(item, InputType))

    def iter_visit_order(self) -> Iterator[SchemaType]:
        """Yield types in visitation order: scalars, objects, enums, inputs."""
        yield from self.scalars
        yield from self.objects
        yield from self.enums
        yield from self.inputs

    def visit(self, handlers: VisitHandlers) -> None:
        """Deliver every generated type exactly once to the matching handler.

        An exception raised by a handler stops the visit and propagates.
        """
        for item in self.iter_visit_order():
            if isinstance(item, ScalarType):
                handlers.scalar(item)
            elif isinstance(item, ObjectType):
                handlers.object(item)
            elif isinstance(item, EnumType):
                handlers.enum(item)
            elif isinstance(item, InputType):
                handlers.input(item)
            else:
                assert_never(item)

    def _visitable(self) -> list[SchemaType]:
        selected = [
            item
            for item in self.types
            if not item.name.startswith("__") and item.name not in BUILTIN_SCALARS
        ]
        return sorted(selected, key=lambda item: item.name)


def _kind(item: SchemaType) -> str:
    if isinstance(item, ScalarType):
        return SCALAR
    if isinstance(item, ObjectType):
        return OBJECT
    if isinstance(item, EnumType):
        return ENUM
    if isinstance(item, InputType):
        return INPUT_OBJECT
    assert_never(item)


__all__ = [
    "BUILTIN_SCALARS",
    "ENUM",
    "EnumType",
    "EnumValue",
    "Field",
    "INPUT_OBJECT",
    "InputType",
    "InputValue",
    "LIST",
    "NON_NULL",
    "OBJECT",
    "ObjectType",
    "SCALAR",
    "ScalarType",
    "Schema",
    "SchemaType",
    "TypeRef",
    "VisitHandlers",
]
