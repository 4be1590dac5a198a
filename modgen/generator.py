"""One-pass generation and the multi-pass convergence loop."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

from .config import GeneratorConfig
from .errors import ConvergenceError, raise_if_cancelled
from .logging import get_logger
from .naming import to_kebab
from .overlay import LayeredWorkspace, MemoryLayer
from .postproc import GitAttributesMarker, SourceFormatter
from .rendering import TemplateRenderer
from .schema import Schema
from .workspace import (
    CLIENT_GEN_FILE,
    DEFAULT_PACKAGE_NAME,
    LOCK_FILE,
    MANIFEST_FILE,
    ManifestReconciler,
    PackageAbsent,
    PassState,
    ProbeResult,
    ScaffoldWriter,
    SourcePackage,
    WorkspaceProber,
)

PostCommand = Tuple[str, ...]

# Regenerates the lock file from the reconciled manifest.
POST_COMMANDS: Tuple[PostCommand, ...] = (
    ("uv", "pip", "compile", MANIFEST_FILE, "--quiet", "--output-file", LOCK_FILE),
)

FALLBACK_IDENTIFIER = "module"


@dataclass
class GeneratedState:
    """Outcome of one generation pass, owned by the caller.

    ``overlay`` holds every file the pass produced on top of the output
    directory; nothing has been written until :meth:`Generator.apply`.
    """

    overlay: LayeredWorkspace
    post_commands: Tuple[PostCommand, ...]
    pass_state: PassState
    package_name: str
    module_path: str

    @property
    def needs_regenerate(self) -> bool:
        return self.pass_state is PassState.FIRST_PASS


class Generator:
    """Runs the probe, scaffold, reconcile, render, format and overlay stages."""

    def __init__(
        self,
        config: GeneratorConfig,
        *,
        prober: WorkspaceProber | None = None,
        scaffold: ScaffoldWriter | None = None,
        reconciler: ManifestReconciler | None = None,
        renderer: TemplateRenderer | None = None,
        formatter: SourceFormatter | None = None,
        marker: GitAttributesMarker | None = None,
        post_commands: Sequence[PostCommand] = POST_COMMANDS,
    ) -> None:
        self.config = config
        self.prober = prober or WorkspaceProber()
        self.scaffold = scaffold or ScaffoldWriter()
        self.reconciler = reconciler or ManifestReconciler()
        self.renderer = renderer or TemplateRenderer(config.templates_dir)
        self.formatter = formatter or SourceFormatter()
        self.marker = marker or GitAttributesMarker()
        self.post_commands = tuple(tuple(command) for command in post_commands)
        self.logger = get_logger("generator")

    def generate(self, schema: Schema, cancel: object = None) -> GeneratedState:
        """Run a single pass and return its overlay without touching the disk."""
        config = self.config
        output_dir = config.output_dir
        self.logger.info("Generating %s in %s", CLIENT_GEN_FILE, output_dir)
        layer = MemoryLayer()

        probed = self.prober.probe(output_dir)
        if isinstance(probed, SourcePackage):
            package_name = probed.name
            is_package = probed.is_package
        else:
            self.logger.debug("No package in %s (%s); using defaults", output_dir, probed.reason)
            package_name = DEFAULT_PACKAGE_NAME
            is_package = False

        pass_state = PassState.CONVERGED
        if config.is_module:
            pass_state = self.scaffold.ensure_entry_point(
                layer, output_dir, config.module_name, is_package=is_package
            )

        outcome = self.reconciler.reconcile(layer, output_dir, self._identifier())
        raise_if_cancelled(cancel, "bootstrap")

        source = self._source_package(probed) if config.is_module else None
        rendered = self.renderer.render(
            schema,
            package_name=package_name,
            module_path=outcome.module_path,
            module_name=config.module_name,
            source_dir=_relative_dir(config.source_dir, output_dir),
            source=source,
            cancel=cancel,
        )
        raise_if_cancelled(cancel, "render")

        code = self.formatter.process(rendered)
        raise_if_cancelled(cancel, "format")

        layer.write_file(CLIENT_GEN_FILE, code)
        self.marker.install(layer, CLIENT_GEN_FILE, output_dir)
        self.logger.debug("Pass produced %d files (%s)", len(layer), pass_state.value)
        return GeneratedState(
            overlay=LayeredWorkspace(layer, output_dir),
            post_commands=self.post_commands,
            pass_state=pass_state,
            package_name=package_name,
            module_path=outcome.module_path,
        )

    def apply(self, state: GeneratedState) -> List[Path]:
        return state.overlay.commit()

    def run_post_commands(
        self,
        state: GeneratedState,
        runner: Callable[..., object] = subprocess.run,
    ) -> None:
        """Run the queued commands against the materialised output directory."""
        for command in state.post_commands:
            self.logger.info("Running %s", " ".join(command))
            runner(list(command), cwd=self.config.output_dir, check=True)

    def sync(
        self,
        schema: Schema,
        *,
        cancel: object = None,
        max_passes: Optional[int] = None,
        run_post_commands: bool = True,
        runner: Callable[..., object] = subprocess.run,
    ) -> GeneratedState:
        """Generate and apply until a pass writes no new inputs.

        A fresh workspace takes two passes: the first scaffolds the entry
        point, the second renders against it. Raises
        :class:`ConvergenceError` when ``max_passes`` is reached first.
        """
        limit = self.config.max_passes if max_passes is None else max_passes
        if limit < 1:
            raise ValueError(f"max_passes must be at least 1, got {limit}")
        for attempt in range(1, limit + 1):
            state = self.generate(schema, cancel=cancel)
            self.apply(state)
            if not state.needs_regenerate:
                self.logger.info("Workspace converged after %d pass(es)", attempt)
                if run_post_commands:
                    self.run_post_commands(state, runner=runner)
                return state
            self.logger.info("Pass %d wrote new inputs; regenerating", attempt)
        raise ConvergenceError(limit)

    def _identifier(self) -> str:
        return (
            to_kebab(self.config.module_name)
            or to_kebab(self.config.output_dir.name)
            or FALLBACK_IDENTIFIER
        )

    def _source_package(self, probed: ProbeResult) -> Optional[SourcePackage]:
        if self.config.source_dir == self.config.output_dir:
            found: ProbeResult = probed
        else:
            found = self.prober.probe(self.config.source_dir)
        if isinstance(found, PackageAbsent):
            return None
        return found


def _relative_dir(path: Path, start: Path) -> str:
    return Path(os.path.relpath(path, start)).as_posix()


__all__ = ["GeneratedState", "Generator", "POST_COMMANDS", "PassState", "PostCommand"]
