"""Merge the engine's required dependencies into the workspace manifest."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional

import tomlkit
from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name
from tomlkit.exceptions import TOMLKitError

from ..baseline import baseline_lock, baseline_manifest
from ..errors import BaselineError, ManifestParseError
from ..logging import get_logger
from ..overlay import MemoryLayer

MANIFEST_FILE = "pyproject.toml"
LOCK_FILE = "requirements.lock"
NEW_MODULE_VERSION = "0.1.0"


@dataclass
class Baseline:
    """Parsed form of the bundled manifest."""

    requirements: List[Requirement]
    requires_python: Optional[str] = None


@dataclass
class ManifestOutcome:
    """What reconciliation decided for this pass."""

    module_path: str
    created: bool
    changed: List[str] = field(default_factory=list)


class ManifestReconciler:
    """Upserts baseline requirements by project name, never touching other entries."""

    def __init__(self, baseline_text: str | None = None, lock: bytes | None = None) -> None:
        self._baseline_text = baseline_text
        self._lock = lock
        self.logger = get_logger("manifest")

    def load_baseline(self) -> Baseline:
        text = self._baseline_text if self._baseline_text is not None else baseline_manifest()
        try:
            document = tomlkit.parse(text)
        except TOMLKitError as exc:
            raise BaselineError(f"parse embedded manifest: {exc}") from exc

        project = document.get("project")
        dependencies = project.get("dependencies") if isinstance(project, dict) else None
        if not isinstance(dependencies, list):
            raise BaselineError("embedded manifest has no [project].dependencies array")

        requirements: List[Requirement] = []
        for item in dependencies:
            try:
                requirements.append(Requirement(str(item)))
            except InvalidRequirement as exc:
                raise BaselineError(f"embedded manifest requirement {item!r}: {exc}") from exc
        requires_python = project.get("requires-python")
        return Baseline(
            requirements=requirements,
            requires_python=str(requires_python) if requires_python is not None else None,
        )

    def reconcile(self, layer: MemoryLayer, output_dir: Path, identifier: str) -> ManifestOutcome:
        """Write the reconciled manifest and lock file into ``layer``.

        ``identifier`` names a freshly created manifest; an existing manifest
        keeps the module identity it already declares.
        """
        baseline = self.load_baseline()
        path = output_dir / MANIFEST_FILE
        try:
            existing = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            existing = None

        if existing is None:
            document = self._new_manifest(baseline, identifier)
            outcome = ManifestOutcome(
                module_path=identifier,
                created=True,
                changed=[str(requirement) for requirement in baseline.requirements],
            )
            self.logger.info("Creating %s for %s", MANIFEST_FILE, identifier)
        else:
            document = self._parse_existing(path, existing)
            changed = self._upsert(path, document, baseline)
            outcome = ManifestOutcome(
                module_path=_declared_name(document) or identifier,
                created=False,
                changed=changed,
            )
            self.logger.debug("Reconciled %s (%d requirement changes)", path, len(changed))

        layer.write_file(MANIFEST_FILE, tomlkit.dumps(document))
        layer.write_file(LOCK_FILE, self._lock if self._lock is not None else baseline_lock())
        return outcome

    @staticmethod
    def _parse_existing(path: Path, text: str) -> tomlkit.TOMLDocument:
        try:
            return tomlkit.parse(text)
        except TOMLKitError as exc:
            raise ManifestParseError(path, str(exc)) from exc

    @staticmethod
    def _new_manifest(baseline: Baseline, identifier: str) -> tomlkit.TOMLDocument:
        document = tomlkit.document()
        project = tomlkit.table()
        project.add("name", identifier)
        project.add("version", NEW_MODULE_VERSION)
        if baseline.requires_python:
            project.add("requires-python", baseline.requires_python)
        dependencies = tomlkit.array()
        for requirement in baseline.requirements:
            dependencies.append(str(requirement))
        dependencies.multiline(True)
        project.add("dependencies", dependencies)
        document.add("project", project)
        return document

    def _upsert(self, path: Path, document: tomlkit.TOMLDocument, baseline: Baseline) -> List[str]:
        project = document.get("project")
        if project is None:
            project = tomlkit.table()
            document.add("project", project)
        elif not isinstance(project, dict):
            raise ManifestParseError(path, "[project] must be a table")

        dependencies = project.get("dependencies")
        if dependencies is None:
            dependencies = tomlkit.array()
            dependencies.multiline(True)
            project.add("dependencies", dependencies)
            dependencies = project["dependencies"]
        elif not isinstance(dependencies, list):
            raise ManifestParseError(path, "[project].dependencies must be an array")

        changed: List[str] = []
        for requirement in baseline.requirements:
            key = canonicalize_name(requirement.name)
            wanted = str(requirement)
            positions = [
                index
                for index, item in enumerate(dependencies)
                if _requirement_key(path, item) == key
            ]
            if not positions:
                dependencies.append(wanted)
                changed.append(wanted)
                continue

            current = str(dependencies[positions[0]])
            previous = Requirement(current)
            merged = _merge_requirement(previous, requirement)
            if current != merged:
                if previous.specifier and previous.specifier != requirement.specifier:
                    self.logger.warning(
                        "Replacing pinned requirement %s with %s from the engine baseline",
                        current,
                        merged,
                    )
                dependencies[positions[0]] = merged
                changed.append(merged)
            for extra in reversed(positions[1:]):
                del dependencies[extra]
        return changed


def _merge_requirement(previous: Requirement, baseline: Requirement) -> str:
    """The user entry with its version replaced by the baseline specifier.

    Extras and environment markers the user declared are kept.
    """
    merged = Requirement(str(previous))
    merged.extras = set(previous.extras) | set(baseline.extras)
    merged.specifier = baseline.specifier
    merged.url = baseline.url
    if merged.marker is None:
        merged.marker = baseline.marker
    return str(merged)


def _requirement_key(path: Path, item: Any) -> str:
    if not isinstance(item, str):
        raise ManifestParseError(path, f"dependency entries must be strings, got {item!r}")
    try:
        return canonicalize_name(Requirement(str(item)).name)
    except InvalidRequirement as exc:
        raise ManifestParseError(path, f"invalid requirement {str(item)!r}: {exc}") from exc


def _declared_name(document: tomlkit.TOMLDocument) -> Optional[str]:
    project = document.get("project")
    if isinstance(project, dict) and project.get("name"):
        return str(project["name"])
    tool = document.get("tool")
    poetry = tool.get("poetry") if isinstance(tool, dict) else None
    if isinstance(poetry, dict) and poetry.get("name"):
        return str(poetry["name"])
    return None


__all__ = [
    "Baseline",
    "LOCK_FILE",
    "MANIFEST_FILE",
    "ManifestOutcome",
    "ManifestReconciler",
]
