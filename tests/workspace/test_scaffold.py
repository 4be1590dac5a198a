"""Tests for the starter entry point writer."""

from __future__ import annotations

import ast

from modgen.overlay import MemoryLayer
from modgen.workspace import PassState, ScaffoldWriter


def test_writes_starter_into_layer_only(workspace) -> None:
    layer = MemoryLayer()

    state = ScaffoldWriter().ensure_entry_point(layer, workspace.path(), "My Cool Thing")

    assert state is PassState.FIRST_PASS
    assert layer.files() == ["main.py"]
    assert not (workspace.path() / "main.py").exists()

    source = layer.read_file("main.py").decode("utf-8")
    tree = ast.parse(source)
    classes = [node.name for node in tree.body if isinstance(node, ast.ClassDef)]
    assert classes == ["MyCoolThing"]
    assert "from engine_gen import Container, dag" in source
    assert "def my_function(self, string_arg: str) -> Container:" in source


def test_package_workspace_uses_relative_import() -> None:
    source = ScaffoldWriter().render("thing", is_package=True)

    assert "from .engine_gen import Container, dag" in source
    assert "class Thing:" in source


def test_existing_entry_point_is_left_alone(workspace) -> None:
    workspace.write({"main.py": "class Custom:\n    pass\n"})
    layer = MemoryLayer()

    state = ScaffoldWriter().ensure_entry_point(layer, workspace.path(), "My Cool Thing")

    assert state is PassState.CONVERGED
    assert len(layer) == 0
    assert workspace.read("main.py") == "class Custom:\n    pass\n"
