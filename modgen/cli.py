"""CLI entrypoints for modgen commands."""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from pathlib import Path

import yaml

from .config import CONFIG_FILENAME, ConfigError, GeneratorConfig, load_config
from .errors import GeneratorError
from .generator import Generator
from .logging import configure_logging
from .schema import Schema, load_schema


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_log_file_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    parser.add_argument(
        "--log-file",
        type=Path,
        default=argparse.SUPPRESS if suppress_default else None,
        help="Also write debug logs to this file.",
    )


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    _add_verbose_option(parser, suppress_default=True)
    _add_log_file_option(parser, suppress_default=True)
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path to the module workspace (defaults to current directory).",
    )
    parser.add_argument(
        "--schema",
        type=Path,
        default=None,
        help=f"Introspection JSON file (overrides `schema` in {CONFIG_FILENAME}).",
    )


def _add_skip_post_commands_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--skip-post-commands",
        action="store_true",
        help="Write files but do not run the dependency lock command.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modgen",
        description="Generate typed engine API bindings and bootstrap extension modules.",
    )
    _add_verbose_option(parser)
    _add_log_file_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser(
        "init",
        help="Bootstrap a new extension module and generate its bindings.",
    )
    _add_common_options(init_parser)
    _add_skip_post_commands_option(init_parser)
    init_parser.add_argument(
        "--name",
        required=True,
        help="Human-readable module name, e.g. 'My Cool Thing'.",
    )

    sync_parser = subparsers.add_parser(
        "sync",
        help="Regenerate bindings until the workspace is stable.",
    )
    _add_common_options(sync_parser)
    _add_skip_post_commands_option(sync_parser)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Run a single generation pass.",
    )
    _add_common_options(generate_parser)
    generate_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List the files the pass would write without touching the workspace.",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for modgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    root = Path(args.path).expanduser().resolve()
    if args.command == "init":
        root.mkdir(parents=True, exist_ok=True)

    try:
        config = load_config(root).with_overrides(
            module_name=getattr(args, "name", None),
            schema_path=args.schema.resolve() if args.schema else None,
        )
    except ConfigError as exc:
        parser.exit(1, f"modgen {args.command} failed: {exc}\n")

    schema = _load_schema(parser, args.command, config)
    generator = Generator(config)
    skip_post = bool(getattr(args, "skip_post_commands", False))

    try:
        if args.command == "init":
            _write_config(root, config)
            state = generator.sync(schema, run_post_commands=not skip_post)
            print(f"Module {config.module_name} initialized at {_relativize(config.output_dir)}")
        elif args.command == "sync":
            state = generator.sync(schema, run_post_commands=not skip_post)
            print(f"Bindings up to date in {_relativize(config.output_dir)}")
        elif args.command == "generate":
            state = generator.generate(schema)
            if getattr(args, "dry_run", False):
                print("Files (dry-run):")
                for name in state.overlay.generated_files():
                    print(f"  {name}")
            else:
                for path in generator.apply(state):
                    print(f"Wrote {_relativize(path)}")
            if state.needs_regenerate:
                print("Scaffolded new inputs; run `modgen generate` again to pick them up.")
        else:  # pragma: no cover - argparse enforces choices
            parser.exit(1, "Unknown command\n")
    except GeneratorError as exc:
        parser.exit(
            1, f"modgen {args.command} failed: {exc}\nRun with --verbose for more details.\n"
        )
    except subprocess.CalledProcessError as exc:
        parser.exit(1, f"modgen {args.command} failed: post command exited with {exc.returncode}\n")
    except OSError as exc:
        parser.exit(1, f"modgen {args.command} failed: {exc}\n")


def _load_schema(parser: argparse.ArgumentParser, command: str, config: GeneratorConfig) -> Schema:
    if config.schema_path is None:
        parser.exit(
            1,
            f"modgen {command} failed: no schema given; pass --schema or set `schema` in "
            f"{CONFIG_FILENAME}\n",
        )
    try:
        return load_schema(config.schema_path)
    except (OSError, ValueError) as exc:
        parser.exit(1, f"modgen {command} failed: cannot read schema {config.schema_path}: {exc}\n")


def _write_config(root: Path, config: GeneratorConfig) -> None:
    path = root / CONFIG_FILENAME
    if path.exists():
        return
    data: dict[str, object] = {"module": {"name": config.module_name}}
    if config.schema_path is not None:
        data["schema"] = Path(os.path.relpath(config.schema_path, root)).as_posix()
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
