"""Starter source for workspaces that have no entry point yet."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from ..logging import get_logger
from ..naming import module_class_name
from ..overlay import MemoryLayer
from .prober import CLIENT_GEN_FILE, STARTER_TEMPLATE_FILE

_STARTER_SOURCE = '''"""{title} module functions."""

{import_line}


class {class_name}:
    def my_function(self, string_arg: str) -> Container:
        return dag.container().from_("alpine:latest").with_exec(["echo", string_arg]).sync()
'''


class PassState(str, Enum):
    """Where a workspace stands in the two-pass bootstrap.

    ``FIRST_PASS`` means this pass wrote inputs (the starter file) that the
    renderer could not see yet, so the caller must generate again.
    ``CONVERGED`` means every input was already on disk.
    """

    FIRST_PASS = "first_pass"
    CONVERGED = "converged"


class ScaffoldWriter:
    """Writes ``main.py`` into the overlay when the workspace lacks one."""

    def __init__(self) -> None:
        self.logger = get_logger("scaffold")

    def ensure_entry_point(
        self,
        layer: MemoryLayer,
        output_dir: Path,
        module_name: str,
        *,
        is_package: bool = False,
    ) -> PassState:
        if (output_dir / STARTER_TEMPLATE_FILE).exists():
            return PassState.CONVERGED

        # The starter file is an input to rendering, so this pass cannot see it.
        layer.write_file(STARTER_TEMPLATE_FILE, self.render(module_name, is_package=is_package))
        self.logger.info("Scaffolded %s for module %s", STARTER_TEMPLATE_FILE, module_name)
        return PassState.FIRST_PASS

    def render(self, module_name: str, *, is_package: bool = False) -> str:
        generated = Path(CLIENT_GEN_FILE).stem
        source = f".{generated}" if is_package else generated
        return _STARTER_SOURCE.format(
            title=module_name.strip() or "Extension",
            import_line=f"from {source} import Container, dag",
            class_name=module_class_name(module_name),
        )


__all__ = ["PassState", "ScaffoldWriter"]
