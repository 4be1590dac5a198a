"""Generated-file markers for diff and merge tooling."""

from __future__ import annotations

from pathlib import Path

from ..overlay import MemoryLayer

GITATTRIBUTES_FILE = ".gitattributes"


class GitAttributesMarker:
    """Flags generated files as ``linguist-generated`` in ``.gitattributes``."""

    LINE_FMT = "/{file_name} linguist-generated=true"

    def line(self, file_name: str) -> str:
        return self.LINE_FMT.format(file_name=file_name)

    def install(self, layer: MemoryLayer, file_name: str, output_dir: Path) -> bool:
        """Ensure ``file_name`` is marked, writing through ``layer``.

        An existing ``.gitattributes`` that already mentions the file is left
        alone; otherwise the marker line is appended to its current content.
        Returns True when the layer received a new ``.gitattributes``.
        """
        existing = ""
        path = output_dir / GITATTRIBUTES_FILE
        if path.is_file():
            existing = path.read_text(encoding="utf-8")
            if self._mentions(existing, file_name):
                return False

        content = existing
        if content and not content.endswith("\n"):
            content += "\n"
        content += self.line(file_name) + "\n"
        layer.write_file(GITATTRIBUTES_FILE, content)
        return True

    @staticmethod
    def _mentions(content: str, file_name: str) -> bool:
        for raw in content.splitlines():
            stripped = raw.strip()
            if not stripped or stripped.startswith("#"):
                continue
            pattern = stripped.split()[0]
            if pattern.lstrip("/") == file_name:
                return True
        return False


__all__ = ["GITATTRIBUTES_FILE", "GitAttributesMarker"]
