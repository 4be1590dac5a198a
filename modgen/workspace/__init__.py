"""Workspace probing, scaffolding and manifest reconciliation."""

from .manifest import LOCK_FILE, MANIFEST_FILE, ManifestOutcome, ManifestReconciler
from .prober import (
    CLIENT_GEN_FILE,
    DEFAULT_PACKAGE_NAME,
    STARTER_TEMPLATE_FILE,
    PackageAbsent,
    ProbeResult,
    SourceFunction,
    SourceObject,
    SourcePackage,
    SourceParameter,
    WorkspaceProber,
)
from .scaffold import PassState, ScaffoldWriter

__all__ = [
    "CLIENT_GEN_FILE",
    "DEFAULT_PACKAGE_NAME",
    "LOCK_FILE",
    "MANIFEST_FILE",
    "ManifestOutcome",
    "ManifestReconciler",
    "PackageAbsent",
    "PassState",
    "ProbeResult",
    "STARTER_TEMPLATE_FILE",
    "ScaffoldWriter",
    "SourceFunction",
    "SourceObject",
    "SourcePackage",
    "SourceParameter",
    "WorkspaceProber",
]
