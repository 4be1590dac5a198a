"""Helper functions exposed to the binding templates."""

from __future__ import annotations

import ast
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..naming import module_class_name, safe_identifier, to_pascal, to_snake
from ..schema import BUILTIN_SCALARS, Field, InputValue, ObjectType, Schema, SchemaType, TypeRef
from ..schema.model import LIST, OBJECT
from ..workspace.prober import SourceObject, SourcePackage

ROOT_CLASS_NAME = "Client"
RUNTIME_EXPORTS = ("Context", "QueryError")

_BUILTIN_ANNOTATIONS = {
    "String": "str",
    "Int": "int",
    "Float": "float",
    "Boolean": "bool",
    "ID": "str",
}


class TemplateFuncs:
    """Per-run helpers bound to one schema, module name and probed source package."""

    def __init__(
        self,
        schema: Schema,
        *,
        module_name: str = "",
        source: Optional[SourcePackage] = None,
    ) -> None:
        self.schema = schema
        self.module_name = module_name
        self.source = source

    # names

    def class_name(self, name: str) -> str:
        if name == self.schema.query_type:
            return ROOT_CLASS_NAME
        if name in _BUILTIN_ANNOTATIONS:
            return _BUILTIN_ANNOTATIONS[name]
        if name.isidentifier():
            return name
        return to_pascal(name) or "_"

    @staticmethod
    def field_name(name: str) -> str:
        return safe_identifier(to_snake(name) or name)

    @staticmethod
    def enum_member(name: str) -> str:
        return safe_identifier(name)

    # types

    def py_type(self, ref: TypeRef, optional: bool = False) -> str:
        annotation = self._annotation(ref.unwrap_non_null())
        if optional or not ref.is_non_null:
            return f"{annotation} | None"
        return annotation

    def return_type(self, field: Field) -> str:
        if self.is_object(field.type_ref):
            return self.class_name(field.type_ref.named().name or "")
        element = self.object_list_class(field.type_ref)
        if element:
            return f"list[{element}]"
        return self.py_type(field.type_ref)

    def is_object(self, ref: TypeRef) -> bool:
        inner = ref.unwrap_non_null()
        return inner.kind == OBJECT

    def object_list_class(self, ref: TypeRef) -> str:
        """Class name of the element type when ``ref`` is a list of objects."""
        inner = ref.unwrap_non_null()
        if inner.kind != LIST or inner.of_type is None:
            return ""
        element = inner.of_type.unwrap_non_null()
        if element.kind != OBJECT:
            return ""
        return self.class_name(element.name or "")

    @staticmethod
    def required_args(args: Sequence[InputValue]) -> List[InputValue]:
        return [arg for arg in args if not arg.is_optional]

    @staticmethod
    def optional_args(args: Sequence[InputValue]) -> List[InputValue]:
        return [arg for arg in args if arg.is_optional]

    def _annotation(self, ref: TypeRef) -> str:
        if ref.kind == LIST:
            if ref.of_type is None:
                return "list[Any]"
            element = self._annotation(ref.of_type.unwrap_non_null())
            if not ref.of_type.is_non_null:
                element = f"{element} | None"
            return f"list[{element}]"
        return self.class_name(ref.name or "")

    # schema cross references

    def is_root(self, item: SchemaType) -> bool:
        return item.name == self.schema.query_type

    @staticmethod
    def has_id(item: ObjectType) -> bool:
        return item.field("id") is not None

    def exported_names(self) -> List[str]:
        names = list(RUNTIME_EXPORTS)
        for item in self.schema.iter_visit_order():
            names.append(self.class_name(item.name))
        if self.schema.get(self.schema.query_type) is not None:
            names.append("dag")
        return names

    # module dispatch

    def main_object(self) -> str:
        return module_class_name(self.module_name)

    def source_objects(self) -> Tuple[SourceObject, ...]:
        if self.source is None:
            return ()
        return self.source.objects

    def decode_target(self, annotation: Optional[str]) -> Optional[str]:
        """Generated class able to load an argument annotated with ``annotation``."""
        if not annotation:
            return None
        try:
            tree = ast.parse(annotation, mode="eval")
        except SyntaxError:
            return None
        for node in ast.walk(tree):
            name = None
            if isinstance(node, ast.Name):
                name = node.id
            elif isinstance(node, ast.Constant) and isinstance(node.value, str):
                name = node.value
            if name and name not in BUILTIN_SCALARS and self.schema.kind_of(name) == OBJECT:
                return self.class_name(name)
        return None

    # text

    @staticmethod
    def docstring(text: Optional[str], indent: int = 4, default: str = "") -> str:
        body = (text or "").strip() or default
        if not body:
            return ""
        body = body.replace("\\", "\\\\").replace('"""', '\\"\\"\\"')
        if body.endswith('"') and not body.endswith('\\"'):
            body = body[:-1] + '\\"'
        lines = body.splitlines()
        if len(lines) == 1:
            return f'"""{lines[0]}"""'
        pad = " " * indent
        rest = [f"{pad}{line}" if line.strip() else "" for line in lines[1:]]
        return '"""' + lines[0] + "\n" + "\n".join(rest) + f"\n{pad}" + '"""'

    @staticmethod
    def pyrepr(value: object) -> str:
        return repr(value)

    def filters(self) -> Dict[str, Callable[..., object]]:
        return {
            "class_name": self.class_name,
            "field_name": self.field_name,
            "enum_member": self.enum_member,
            "py_type": self.py_type,
            "return_type": self.return_type,
            "object_list_class": self.object_list_class,
            "required_args": self.required_args,
            "optional_args": self.optional_args,
            "decode_target": self.decode_target,
            "docstring": self.docstring,
            "pyrepr": self.pyrepr,
        }

    def globals(self) -> Dict[str, Callable[..., object]]:
        return {
            "is_root": self.is_root,
            "is_object": self.is_object,
            "has_id": self.has_id,
            "exported_names": self.exported_names,
            "main_object": self.main_object,
            "source_objects": self.source_objects,
        }


__all__ = ["ROOT_CLASS_NAME", "RUNTIME_EXPORTS", "TemplateFuncs"]
