"""Virtual file layers that defer workspace writes until commit."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Dict, Iterator, List

from .logging import get_logger


class MemoryLayer:
    """In-memory files keyed by POSIX path relative to the workspace root."""

    def __init__(self) -> None:
        self._files: Dict[str, bytes] = {}

    def write_file(self, relative: str, content: bytes | str) -> None:
        key = _normalise(relative)
        data = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        self._files[key] = data

    def read_file(self, relative: str) -> bytes:
        key = _normalise(relative)
        try:
            return self._files[key]
        except KeyError:
            raise FileNotFoundError(key) from None

    def exists(self, relative: str) -> bool:
        return _normalise(relative) in self._files

    def files(self) -> List[str]:
        return sorted(self._files)

    def __iter__(self) -> Iterator[str]:
        return iter(self.files())

    def __len__(self) -> int:
        return len(self._files)


class LayeredWorkspace:
    """Read-through view: the generated layer first, the real directory second.

    Nothing touches ``base_dir`` until :meth:`commit` is called.
    """

    def __init__(self, layer: MemoryLayer, base_dir: Path) -> None:
        self.layer = layer
        self.base_dir = base_dir
        self.logger = get_logger("overlay")

    def read_bytes(self, relative: str) -> bytes:
        if self.layer.exists(relative):
            return self.layer.read_file(relative)
        return (self.base_dir / _normalise(relative)).read_bytes()

    def read_text(self, relative: str) -> str:
        return self.read_bytes(relative).decode("utf-8")

    def exists(self, relative: str) -> bool:
        return self.layer.exists(relative) or (self.base_dir / _normalise(relative)).is_file()

    def generated_files(self) -> List[str]:
        """Files the generated layer would add or replace."""
        return self.layer.files()

    def files(self) -> List[str]:
        """Every file visible through the overlay."""
        visible = set(self.layer.files())
        if self.base_dir.is_dir():
            for path in self.base_dir.rglob("*"):
                if path.is_file():
                    visible.add(path.relative_to(self.base_dir).as_posix())
        return sorted(visible)

    def commit(self) -> List[Path]:
        """Write the generated layer into the base directory."""
        written: List[Path] = []
        for relative in self.layer.files():
            target = self.base_dir / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(self.layer.read_file(relative))
            written.append(target)
        self.logger.info("Wrote %d files to %s", len(written), self.base_dir)
        return written


def _normalise(relative: str) -> str:
    path = PurePosixPath(relative.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts:
        raise ValueError(f"overlay paths must stay inside the workspace: {relative}")
    return path.as_posix()


__all__ = ["LayeredWorkspace", "MemoryLayer"]
