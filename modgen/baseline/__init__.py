"""Dependency baseline bundled with the generator."""

from __future__ import annotations

from importlib import resources

MANIFEST_RESOURCE = "manifest.toml"
LOCK_RESOURCE = "requirements.lock"


def baseline_manifest() -> str:
    """Return the bundled manifest listing what generated code needs."""
    return resources.files(__name__).joinpath(MANIFEST_RESOURCE).read_text(encoding="utf-8")


def baseline_lock() -> bytes:
    """Return the bundled lock file, written verbatim into every workspace."""
    return resources.files(__name__).joinpath(LOCK_RESOURCE).read_bytes()


__all__ = ["LOCK_RESOURCE", "MANIFEST_RESOURCE", "baseline_lock", "baseline_manifest"]
