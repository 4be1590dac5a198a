"""Tests for static probing of existing workspaces."""

from __future__ import annotations

from pathlib import Path

import pytest

from modgen.errors import ProbeAmbiguity, SourceSyntaxError
from modgen.workspace import PackageAbsent, SourcePackage, WorkspaceProber


def test_missing_directory_is_absent(tmp_path: Path) -> None:
    result = WorkspaceProber().probe(tmp_path / "nope")

    assert isinstance(result, PackageAbsent)
    assert "does not exist" in result.reason


def test_directory_without_modules_is_absent(workspace) -> None:
    workspace.write({"README.md": "# hi\n", "engine_gen.py": "x = 1\n", "test_main.py": "y = 2\n"})

    result = WorkspaceProber().probe(workspace.path())

    assert isinstance(result, PackageAbsent)


def test_flat_workspace_uses_fallback_name_and_collects_objects(workspace) -> None:
    workspace.write(
        {
            "main.py": '''
            from engine_gen import Container, dag


            class MyCoolThing:
                """Does cool things."""

                def build(self, source: Container, *, tag: str = "latest") -> Container:
                    return source

                async def publish(self, address: str) -> str:
                    return address

                def _helper(self) -> None:
                    pass

                @staticmethod
                def utility() -> None:
                    pass


            class _Private:
                def hidden(self) -> None:
                    pass
            ''',
            "helpers_test.py": "class Ignored:\n    pass\n",
            "conftest.py": "class AlsoIgnored:\n    pass\n",
        }
    )

    result = WorkspaceProber().probe(workspace.path())

    assert isinstance(result, SourcePackage)
    assert result.name == "main"
    assert result.is_package is False
    assert result.modules == ("main",)
    assert [obj.name for obj in result.objects] == ["MyCoolThing"]

    obj = result.object("MyCoolThing")
    assert obj is not None
    assert obj.module == "main"
    assert obj.doc == "Does cool things."
    assert [fn.name for fn in obj.functions] == ["build", "publish"]

    build = obj.functions[0]
    assert [(p.name, p.annotation, p.has_default) for p in build.parameters] == [
        ("source", "Container", False),
        ("tag", "str", True),
    ]
    assert build.returns == "Container"


def test_regular_package_takes_directory_name(tmp_path: Path) -> None:
    root = tmp_path / "My-Pkg"
    root.mkdir()
    (root / "__init__.py").write_text("", encoding="utf-8")
    (root / "main.py").write_text("class MyPkg:\n    def run(self) -> str:\n        return 'ok'\n", encoding="utf-8")

    result = WorkspaceProber().probe(root)

    assert isinstance(result, SourcePackage)
    assert result.name == "my_pkg"
    assert result.is_package is True
    assert result.modules == ("main",)


def test_module_shadowed_by_package_is_ambiguous(workspace) -> None:
    workspace.write({"main.py": "x = 1\n", "main/__init__.py": "y = 2\n"})

    with pytest.raises(ProbeAmbiguity) as excinfo:
        WorkspaceProber().probe(workspace.path())

    assert excinfo.value.candidates == ["main.py", "main/__init__.py"]
    assert "expected 1 package" in str(excinfo.value)


def test_syntax_error_propagates_with_location(workspace) -> None:
    workspace.write({"main.py": "class Broken(:\n    pass\n"})

    with pytest.raises(SourceSyntaxError) as excinfo:
        WorkspaceProber().probe(workspace.path())

    assert excinfo.value.path == workspace.path() / "main.py"
    assert excinfo.value.lineno == 1
