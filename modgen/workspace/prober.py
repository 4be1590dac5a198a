"""Static analysis of an existing module workspace."""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..errors import ProbeAmbiguity, SourceSyntaxError
from ..logging import get_logger
from ..naming import to_snake

CLIENT_GEN_FILE = "engine_gen.py"
STARTER_TEMPLATE_FILE = "main.py"
DEFAULT_PACKAGE_NAME = "main"

_TEST_PREFIXES = ("test_",)
_TEST_SUFFIXES = ("_test.py",)
_EXCLUDED_MODULES = {CLIENT_GEN_FILE, "conftest.py"}


@dataclass(frozen=True)
class SourceParameter:
    """A parameter of a user-declared function."""

    name: str
    annotation: Optional[str]
    has_default: bool


@dataclass(frozen=True)
class SourceFunction:
    """A public method the engine may invoke by name."""

    name: str
    parameters: Tuple[SourceParameter, ...]
    returns: Optional[str]
    doc: str = ""


@dataclass(frozen=True)
class SourceObject:
    """A public top-level class declared by the user."""

    name: str
    module: str
    functions: Tuple[SourceFunction, ...]
    doc: str = ""


@dataclass(frozen=True)
class SourcePackage:
    """Identity and declarations recovered from an existing workspace."""

    name: str
    path: Path
    is_package: bool
    modules: Tuple[str, ...]
    objects: Tuple[SourceObject, ...]

    def object(self, name: str) -> Optional[SourceObject]:
        for candidate in self.objects:
            if candidate.name == name:
                return candidate
        return None


@dataclass(frozen=True)
class PackageAbsent:
    """Probe outcome when no source package exists yet; not an error."""

    path: Path
    reason: str


ProbeResult = Union[SourcePackage, PackageAbsent]


class WorkspaceProber:
    """Loads a directory as a Python source package without importing it."""

    def __init__(self) -> None:
        self.logger = get_logger("prober")

    def probe(self, directory: Path) -> ProbeResult:
        """Return the package found at ``directory`` or :class:`PackageAbsent`.

        Syntax errors in existing modules and ambiguous import names raise;
        only a missing directory or an empty one count as absent.
        """
        if not directory.is_dir():
            return PackageAbsent(path=directory, reason="directory does not exist")

        module_files = self._module_files(directory)
        if not module_files:
            return PackageAbsent(path=directory, reason="no Python modules found")

        self._check_ambiguity(directory, module_files)

        is_package = (directory / "__init__.py").is_file()
        name = to_snake(directory.name) if is_package else DEFAULT_PACKAGE_NAME
        name = name or DEFAULT_PACKAGE_NAME

        objects: List[SourceObject] = []
        for path in module_files:
            tree = self._parse(path)
            if path.stem != "__init__":
                objects.extend(_collect_objects(tree, path.stem))

        package = SourcePackage(
            name=name,
            path=directory,
            is_package=is_package,
            modules=tuple(path.stem for path in module_files if path.stem != "__init__"),
            objects=tuple(objects),
        )
        self.logger.debug(
            "Found existing package %s in %s (%d modules, %d objects)",
            package.name,
            directory,
            len(package.modules),
            len(package.objects),
        )
        return package

    @staticmethod
    def _module_files(directory: Path) -> List[Path]:
        files = []
        for path in sorted(directory.glob("*.py")):
            name = path.name
            if not path.is_file() or name in _EXCLUDED_MODULES:
                continue
            if name.startswith(_TEST_PREFIXES) or name.endswith(_TEST_SUFFIXES):
                continue
            files.append(path)
        return files

    @staticmethod
    def _check_ambiguity(directory: Path, module_files: List[Path]) -> None:
        for path in module_files:
            if path.stem == "__init__":
                continue
            shadow = directory / path.stem / "__init__.py"
            if shadow.is_file():
                raise ProbeAmbiguity(
                    directory,
                    [path.name, f"{path.stem}/__init__.py"],
                )

    @staticmethod
    def _parse(path: Path) -> ast.Module:
        try:
            source = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise SourceSyntaxError(path, str(exc)) from exc
        try:
            return ast.parse(source, filename=str(path))
        except SyntaxError as exc:
            raise SourceSyntaxError(path, exc.msg, exc.lineno) from exc


def _collect_objects(tree: ast.Module, module: str) -> List[SourceObject]:
    objects: List[SourceObject] = []
    for node in tree.body:
        if not isinstance(node, ast.ClassDef) or node.name.startswith("_"):
            continue
        functions = tuple(
            _collect_function(item)
            for item in node.body
            if isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef))
            and not item.name.startswith("_")
            and not _is_static(item)
        )
        objects.append(
            SourceObject(
                name=node.name,
                module=module,
                functions=functions,
                doc=ast.get_docstring(node) or "",
            )
        )
    return objects


def _collect_function(node: ast.FunctionDef | ast.AsyncFunctionDef) -> SourceFunction:
    args = node.args
    positional = list(args.posonlyargs) + list(args.args)
    # defaults align with the tail of the positional parameters
    first_default = len(positional) - len(args.defaults)
    parameters: List[SourceParameter] = []
    for index, arg in enumerate(positional):
        if index == 0:
            continue  # self
        parameters.append(_parameter(arg, index >= first_default))
    for arg, default in zip(args.kwonlyargs, args.kw_defaults):
        parameters.append(_parameter(arg, default is not None))
    return SourceFunction(
        name=node.name,
        parameters=tuple(parameters),
        returns=ast.unparse(node.returns) if node.returns is not None else None,
        doc=ast.get_docstring(node) or "",
    )


def _parameter(arg: ast.arg, has_default: bool) -> SourceParameter:
    annotation = ast.unparse(arg.annotation) if arg.annotation is not None else None
    return SourceParameter(name=arg.arg, annotation=annotation, has_default=has_default)


def _is_static(node: ast.FunctionDef | ast.AsyncFunctionDef) -> bool:
    for decorator in node.decorator_list:
        if isinstance(decorator, ast.Name) and decorator.id == "staticmethod":
            return True
    return False


__all__ = [
    "CLIENT_GEN_FILE",
    "DEFAULT_PACKAGE_NAME",
    "PackageAbsent",
    "ProbeResult",
    "STARTER_TEMPLATE_FILE",
    "SourceFunction",
    "SourceObject",
    "SourcePackage",
    "SourceParameter",
    "WorkspaceProber",
]
