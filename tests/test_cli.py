"""CLI parser and command behaviour tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from modgen.cli import _build_parser, main
from tests._fixtures.sample_schema import introspection


def _write_schema(tmp_path: Path) -> Path:
    path = tmp_path / "schema.json"
    path.write_text(json.dumps(introspection()), encoding="utf-8")
    return path


def test_cli_accepts_verbose_before_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["--verbose", "sync"])
    assert args.verbose is True
    assert args.command == "sync"


def test_cli_accepts_verbose_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["sync", "--verbose"])
    assert args.verbose is True
    assert args.path == "."


def test_cli_init_requires_name() -> None:
    parser = _build_parser()
    with pytest.raises(SystemExit):
        parser.parse_args(["init", "somewhere"])


def test_cli_accepts_generate_flags() -> None:
    parser = _build_parser()
    args = parser.parse_args(["generate", "ws", "--schema", "s.json", "--dry-run"])
    assert args.command == "generate"
    assert args.dry_run is True
    assert args.schema == Path("s.json")


def test_cli_accepts_log_file_after_command() -> None:
    parser = _build_parser()
    args = parser.parse_args(["sync", "--log-file", "logs/run.log"])
    assert args.log_file == Path("logs/run.log")
    assert parser.parse_args(["sync"]).log_file is None


def test_init_bootstraps_and_records_config(tmp_path: Path, capsys) -> None:
    schema_path = _write_schema(tmp_path)
    target = tmp_path / "my-module"

    main(["init", str(target), "--name", "My Cool Thing", "--schema", str(schema_path), "--skip-post-commands"])

    assert (target / "main.py").exists()
    assert (target / "engine_gen.py").exists()
    assert (target / "pyproject.toml").exists()
    config = yaml.safe_load((target / ".modgen.yml").read_text(encoding="utf-8"))
    assert config == {"module": {"name": "My Cool Thing"}, "schema": "../schema.json"}
    assert "initialized" in capsys.readouterr().out

    # the recorded config is enough for a later sync
    main(["sync", str(target), "--skip-post-commands"])
    assert "up to date" in capsys.readouterr().out


def test_generate_dry_run_writes_nothing(tmp_path: Path, capsys) -> None:
    schema_path = _write_schema(tmp_path)
    target = tmp_path / "client"
    target.mkdir()

    main(["generate", str(target), "--schema", str(schema_path), "--dry-run"])

    out = capsys.readouterr().out
    assert "engine_gen.py" in out
    assert "pyproject.toml" in out
    assert list(target.iterdir()) == []


def test_missing_schema_exits_with_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["sync", str(tmp_path)])
    assert excinfo.value.code == 1


def test_generator_errors_exit_with_hint(tmp_path: Path, capsys) -> None:
    schema_path = _write_schema(tmp_path)
    target = tmp_path / "broken"
    target.mkdir()
    (target / "pyproject.toml").write_text("[project\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        main(["generate", str(target), "--schema", str(schema_path)])

    assert excinfo.value.code == 1
    assert "--verbose" in capsys.readouterr().err


def test_log_file_records_debug_output(tmp_path: Path) -> None:
    schema_path = _write_schema(tmp_path)
    target = tmp_path / "client"
    target.mkdir()
    log_file = tmp_path / "logs" / "modgen.log"

    main(["generate", str(target), "--schema", str(schema_path), "--dry-run", "--log-file", str(log_file)])

    text = log_file.read_text(encoding="utf-8")
    assert "DEBUG modgen.renderer: Rendered" in text
