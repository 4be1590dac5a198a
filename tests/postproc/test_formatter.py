"""Tests for canonicalizing rendered bindings."""

from __future__ import annotations

import ast

import pytest

from modgen.errors import MalformedOutput
from modgen.postproc import SourceFormatter
from modgen.rendering import TemplateRenderer
from modgen.schema import Schema


def _imported_names(source: str) -> set[str]:
    names: set[str] = set()
    for node in ast.parse(source).body:
        if isinstance(node, (ast.Import, ast.ImportFrom)):
            names.update(alias.asname or alias.name for alias in node.names)
    return names


def test_rendered_bindings_become_a_valid_module(schema: Schema) -> None:
    rendered = TemplateRenderer().render(
        schema, package_name="main", module_path="thing", module_name="Thing"
    )

    code = SourceFormatter().process(rendered)

    tree = ast.parse(code)
    assert ast.get_docstring(tree).startswith("Code generated by modgen. DO NOT EDIT.")
    assert {"annotations", "Any", "ClassVar", "Mapping", "Enum", "dataclass", "httpx", "json", "os", "sys"} <= (
        _imported_names(code)
    )
    assert "class Client(Type):" in code
    assert 'MAIN_OBJECT = "Thing"' in code


def test_processing_is_idempotent(schema: Schema) -> None:
    formatter = SourceFormatter()
    rendered = TemplateRenderer().render(schema, package_name="main", module_path="thing")

    once = formatter.process(rendered)

    assert formatter.process(once) == once


def test_imports_go_after_docstring_and_future_import() -> None:
    source = '"""Doc."""\nfrom __future__ import annotations\nvalue: Any = json.dumps(1)\n'

    code = SourceFormatter().process(source)

    lines = code.splitlines()
    assert lines[0] == '"""Doc."""'
    assert lines.index("from __future__ import annotations") < lines.index("import json")
    assert lines.index("import json") < lines.index("from typing import Any")
    assert lines.index("from typing import Any") < lines.index("value: Any = json.dumps(1)")


def test_syntax_errors_fail_in_format_stage_with_source() -> None:
    source = "class Broken:\n    def oops(:\n        pass\n"

    with pytest.raises(MalformedOutput) as excinfo:
        SourceFormatter().process(source)

    assert excinfo.value.stage == "format"
    assert excinfo.value.source == source
    assert "def oops(:" in str(excinfo.value)


def test_unknown_names_fail_in_imports_stage_with_source() -> None:
    source = "def build():\n    return frobnicate(Any)\n"

    with pytest.raises(MalformedOutput) as excinfo:
        SourceFormatter().process(source)

    assert excinfo.value.stage == "imports"
    assert "undefined names: frobnicate" in str(excinfo.value)
    assert excinfo.value.source == source


def test_builtins_and_locals_need_no_imports() -> None:
    source = "def total(items):\n    result = sum(len(item) for item in items)\n    return result\n"

    code = SourceFormatter().process(source)

    assert _imported_names(code) == set()


def test_function_locals_do_not_resolve_module_references() -> None:
    source = "def build():\n    data = 1\n    return data\n\n\nVALUE = data\n"

    with pytest.raises(MalformedOutput) as excinfo:
        SourceFormatter().process(source)

    assert excinfo.value.stage == "imports"
    assert "undefined names: data" in str(excinfo.value)


def test_class_body_names_are_hidden_from_methods() -> None:
    source = (
        "class Holder:\n"
        "    limit = 3\n"
        "\n"
        "    def check(self, value):\n"
        "        return value < limit\n"
    )

    with pytest.raises(MalformedOutput, match="undefined names: limit"):
        SourceFormatter().process(source)


def test_enclosing_function_scopes_resolve_closures() -> None:
    source = (
        "def outer(prefix):\n"
        "    def inner(name):\n"
        "        return prefix + name\n"
        "    return [inner(item) for item in ('a', 'b')]\n"
    )

    code = SourceFormatter().process(source)

    assert _imported_names(code) == set()
