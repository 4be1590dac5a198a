"""Exception hierarchy for the generation pipeline."""

from __future__ import annotations

from pathlib import Path


class GeneratorError(RuntimeError):
    """Base class for failures that abort a generation pass."""


class ProbeError(GeneratorError):
    """Raised when an existing workspace cannot be analysed."""


class ProbeAmbiguity(ProbeError):
    """Raised when one import name resolves to more than one source unit."""

    def __init__(self, path: Path, candidates: list[str]) -> None:
        self.path = path
        self.candidates = candidates
        joined = ", ".join(candidates)
        super().__init__(f"expected 1 package in {path}, found {len(candidates)}: {joined}")


class SourceSyntaxError(ProbeError):
    """Raised when an existing workspace module is not valid Python."""

    def __init__(self, path: Path, message: str, lineno: int | None = None) -> None:
        self.path = path
        self.lineno = lineno
        location = f"{path}:{lineno}" if lineno else str(path)
        super().__init__(f"cannot parse {location}: {message}")


class ManifestParseError(GeneratorError):
    """Raised when the workspace dependency manifest is malformed."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"parse {path}: {message}")


class BaselineError(GeneratorError):
    """Raised when the bundled baseline manifest is unusable."""


class RenderError(GeneratorError):
    """Raised when a section template fails to render."""

    def __init__(self, section: str, message: str) -> None:
        self.section = section
        super().__init__(f"render {section}: {message}")


class MalformedOutput(GeneratorError):
    """Raised when the rendered module cannot be canonicalized.

    ``source`` always holds the complete text as it came out of the
    renderer, before any formatting, so the failure can be diagnosed
    without re-running the pipeline.
    """

    def __init__(self, stage: str, message: str, source: str) -> None:
        self.stage = stage
        self.source = source
        super().__init__(f"error formatting generated code ({stage}): {message}\nsource:\n{source}")


class GenerationCancelled(GeneratorError):
    """Raised when the caller cancels a pass at a stage boundary."""

    def __init__(self, stage: str) -> None:
        self.stage = stage
        super().__init__(f"generation cancelled after {stage}")


class ConvergenceError(GeneratorError):
    """Raised when repeated passes keep producing new inputs."""

    def __init__(self, passes: int) -> None:
        self.passes = passes
        super().__init__(f"workspace did not converge after {passes} passes")


def raise_if_cancelled(cancel: object, stage: str) -> None:
    """Abort the pass when ``cancel`` (anything with ``is_set()``) has fired."""
    if cancel is not None and cancel.is_set():  # type: ignore[attr-defined]
        raise GenerationCancelled(stage)


__all__ = [
    "BaselineError",
    "ConvergenceError",
    "GenerationCancelled",
    "GeneratorError",
    "MalformedOutput",
    "ManifestParseError",
    "ProbeAmbiguity",
    "ProbeError",
    "RenderError",
    "SourceSyntaxError",
    "raise_if_cancelled",
]
