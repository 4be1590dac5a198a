"""Tests for the in-memory layer and read-through workspace view."""

from __future__ import annotations

import pytest

from modgen.overlay import LayeredWorkspace, MemoryLayer


def test_memory_layer_normalises_paths() -> None:
    layer = MemoryLayer()
    layer.write_file("pkg\\mod.py", "x = 1\n")
    layer.write_file("./b.txt", b"raw")

    assert layer.files() == ["b.txt", "pkg/mod.py"]
    assert layer.read_file("pkg/mod.py") == b"x = 1\n"
    assert list(layer) == ["b.txt", "pkg/mod.py"]


@pytest.mark.parametrize("path", ["/etc/passwd", "../outside.py", "a/../../b"])
def test_memory_layer_rejects_escaping_paths(path: str) -> None:
    with pytest.raises(ValueError):
        MemoryLayer().write_file(path, "x")


def test_missing_file_raises_file_not_found() -> None:
    with pytest.raises(FileNotFoundError):
        MemoryLayer().read_file("nope.py")


def test_generated_layer_shadows_base(workspace) -> None:
    workspace.write({"main.py": "old\n", "keep.txt": "kept\n"})
    layer = MemoryLayer()
    layer.write_file("main.py", "new\n")
    layer.write_file("engine_gen.py", "gen\n")
    view = LayeredWorkspace(layer, workspace.path())

    assert view.read_text("main.py") == "new\n"
    assert view.read_text("keep.txt") == "kept\n"
    assert view.exists("engine_gen.py") and view.exists("keep.txt")
    assert not view.exists("missing.py")
    assert view.generated_files() == ["engine_gen.py", "main.py"]
    assert view.files() == ["engine_gen.py", "keep.txt", "main.py"]
    assert workspace.read("main.py") == "old\n"


def test_commit_writes_layer_into_base(tmp_path) -> None:
    layer = MemoryLayer()
    layer.write_file("nested/dir/file.py", "x = 1\n")
    base = tmp_path / "fresh"

    written = LayeredWorkspace(layer, base).commit()

    assert written == [base / "nested" / "dir" / "file.py"]
    assert (base / "nested" / "dir" / "file.py").read_text(encoding="utf-8") == "x = 1\n"
