"""Configuration loading for modgen (.modgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_FILENAME = ".modgen.yml"
DEFAULT_MAX_PASSES = 3


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass(frozen=True)
class GeneratorConfig:
    """Options recognised by the generator.

    ``module_name`` names the extension module being scaffolded; when it is
    empty the generator produces plain client bindings without a dispatch
    shim or starter file. ``source_dir`` is analysed for user-declared
    objects, ``output_dir`` receives generated files and manifests.
    """

    output_dir: Path
    source_dir: Path
    module_name: str = ""
    templates_dir: Optional[Path] = None
    schema_path: Optional[Path] = None
    max_passes: int = DEFAULT_MAX_PASSES

    @property
    def is_module(self) -> bool:
        return bool(self.module_name)

    def with_overrides(self, **changes: Any) -> "GeneratorConfig":
        """Return a copy with every non-None keyword applied."""
        applied = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **applied)


def load_config(config_path: Path) -> GeneratorConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent

    if not config_file.exists():
        return GeneratorConfig(output_dir=root, source_dir=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    module_data = _as_dict(data.get("module"))
    codegen_data = _as_dict(data.get("codegen"))

    output_dir = _as_path(root, module_data.get("output_dir")) or root
    source_dir = _as_path(root, module_data.get("source_dir")) or output_dir

    max_passes = _as_int(codegen_data.get("max_passes"))
    if max_passes is not None and max_passes < 1:
        raise ConfigError("codegen.max_passes must be at least 1")

    return GeneratorConfig(
        output_dir=output_dir,
        source_dir=source_dir,
        module_name=_as_str(module_data.get("name")) or "",
        templates_dir=_as_path(root, codegen_data.get("templates_dir")),
        schema_path=_as_path(root, data.get("schema")),
        max_passes=max_passes or DEFAULT_MAX_PASSES,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_path(root: Path, value: Any) -> Optional[Path]:
    text = _as_str(value)
    if not text:
        return None
    path = Path(text).expanduser()
    if not path.is_absolute():
        path = root / path
    return path.resolve()


__all__ = ["CONFIG_FILENAME", "ConfigError", "GeneratorConfig", "load_config"]
