"""Canonicalization of rendered bindings: formatting and import resolution."""

from __future__ import annotations

import ast
import builtins
from typing import Dict, Iterable, Iterator, List, Sequence, Set, Tuple

import black
import isort
from isort.exceptions import ISortError

from ..errors import MalformedOutput
from ..logging import get_logger

# Names the templates may reference without importing them.
KNOWN_IMPORTS: Dict[str, str] = {
    "Any": "from typing import Any",
    "asyncio": "import asyncio",
    "ClassVar": "from typing import ClassVar",
    "Mapping": "from collections.abc import Mapping",
    "Sequence": "from collections.abc import Sequence",
    "Enum": "from enum import Enum",
    "dataclass": "from dataclasses import dataclass",
    "importlib": "import importlib",
    "inspect": "import inspect",
    "json": "import json",
    "os": "import os",
    "sys": "import sys",
    "httpx": "import httpx",
}

_MODULE_DUNDERS = {"__file__", "__name__", "__package__", "__doc__", "__spec__", "__all__"}
_BUILTINS = set(dir(builtins)) | _MODULE_DUNDERS


class SourceFormatter:
    """Turns concatenated template output into a canonical Python module.

    Stage ``format`` checks well-formedness with black; stage ``imports``
    adds the imports the text relies on and normalises them with isort.
    Both stages attach the raw render to :class:`MalformedOutput`.
    """

    def __init__(self, *, line_length: int = 100) -> None:
        self._mode = black.Mode(line_length=line_length)
        self.logger = get_logger("formatter")

    def process(self, source: str) -> str:
        formatted = self.format(source)
        return self.resolve_imports(formatted, original=source)

    def format(self, source: str) -> str:
        try:
            return black.format_str(source, mode=self._mode)
        except black.InvalidInput as exc:
            raise MalformedOutput("format", str(exc), source) from exc

    def resolve_imports(self, formatted: str, *, original: str | None = None) -> str:
        raw = original if original is not None else formatted
        try:
            tree = ast.parse(formatted)
        except SyntaxError as exc:
            raise MalformedOutput("imports", f"line {exc.lineno}: {exc.msg}", raw) from exc

        missing = sorted(_unresolved_names(tree) - _BUILTINS)
        unknown = [name for name in missing if name not in KNOWN_IMPORTS]
        if unknown:
            joined = ", ".join(unknown)
            raise MalformedOutput("imports", f"undefined names: {joined}", raw)

        statements = sorted({KNOWN_IMPORTS[name] for name in missing})
        if statements:
            self.logger.debug("Adding %d imports to generated code", len(statements))
        code = _insert_imports(formatted, tree, statements)
        try:
            code = isort.code(code, profile="black", line_length=self._mode.line_length)
        except ISortError as exc:
            raise MalformedOutput("imports", str(exc), raw) from exc
        try:
            return black.format_str(code, mode=self._mode)
        except black.InvalidInput as exc:
            raise MalformedOutput("imports", str(exc), raw) from exc


def _insert_imports(source: str, tree: ast.Module, statements: List[str]) -> str:
    if not statements:
        return source
    lines = source.splitlines(keepends=True)
    insert_at = 0
    for index, node in enumerate(tree.body):
        is_docstring = (
            index == 0
            and isinstance(node, ast.Expr)
            and isinstance(node.value, ast.Constant)
            and isinstance(node.value.value, str)
        )
        is_future = isinstance(node, ast.ImportFrom) and node.module == "__future__"
        if not (is_docstring or is_future):
            break
        insert_at = node.end_lineno or insert_at
    block = "".join(f"{statement}\n" for statement in statements)
    return "".join(lines[:insert_at]) + "\n" + block + "\n" + "".join(lines[insert_at:])


_SCOPE_NODES = (
    ast.FunctionDef,
    ast.AsyncFunctionDef,
    ast.ClassDef,
    ast.Lambda,
    ast.ListComp,
    ast.SetComp,
    ast.DictComp,
    ast.GeneratorExp,
)


def _walk_scope(nodes: Iterable[ast.AST]) -> Iterator[ast.AST]:
    """Yield ``nodes`` and their descendants without entering nested scopes."""
    pending = list(nodes)
    while pending:
        node = pending.pop()
        yield node
        if not isinstance(node, _SCOPE_NODES):
            pending.extend(ast.iter_child_nodes(node))


def _scope_bindings(nodes: Iterable[ast.AST]) -> Set[str]:
    bound: Set[str] = set()
    for node in _walk_scope(nodes):
        if isinstance(node, ast.Name) and isinstance(node.ctx, (ast.Store, ast.Del)):
            bound.add(node.id)
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            bound.add(node.name)
        elif isinstance(node, (ast.Import, ast.ImportFrom)):
            for alias in node.names:
                bound.add(alias.asname or alias.name.split(".")[0])
        elif isinstance(node, ast.ExceptHandler) and node.name:
            bound.add(node.name)
        elif isinstance(node, (ast.Global, ast.Nonlocal)):
            bound.update(node.names)
        elif isinstance(node, (ast.MatchAs, ast.MatchStar)) and node.name:
            bound.add(node.name)
        elif isinstance(node, ast.MatchMapping) and node.rest:
            bound.add(node.rest)
    return bound


def _parameters(args: ast.arguments) -> List[ast.arg]:
    params = [*args.posonlyargs, *args.args, *args.kwonlyargs]
    params.extend(arg for arg in (args.vararg, args.kwarg) if arg is not None)
    return params


def _unresolved_names(tree: ast.Module) -> Set[str]:
    """Names loaded somewhere in ``tree`` that no visible scope binds.

    Function bodies see enclosing function scopes and the module, but not
    the bodies of the classes they are defined in.
    """
    module = _scope_bindings(tree.body)
    for node in ast.walk(tree):
        if isinstance(node, ast.Global):
            module.update(node.names)
    unresolved: Set[str] = set()
    _check_scope(tree.body, (), module, False, unresolved)
    return unresolved


def _check_scope(
    nodes: Sequence[ast.AST],
    enclosing: Tuple[Set[str], ...],
    local: Set[str],
    in_class: bool,
    unresolved: Set[str],
) -> None:
    visible = (*enclosing, local)
    inner = enclosing if in_class else visible
    for node in _walk_scope(nodes):
        if isinstance(node, ast.Name) and isinstance(node.ctx, ast.Load):
            if not any(node.id in scope for scope in visible):
                unresolved.add(node.id)
        elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda)):
            params = _parameters(node.args)
            outer: List[ast.AST] = [*getattr(node, "decorator_list", []), *node.args.defaults]
            outer.extend(default for default in node.args.kw_defaults if default is not None)
            outer.extend(param.annotation for param in params if param.annotation is not None)
            if getattr(node, "returns", None) is not None:
                outer.append(node.returns)
            _check_scope(outer, enclosing, local, in_class, unresolved)
            body = node.body if isinstance(node.body, list) else [node.body]
            names = _scope_bindings(body) | {param.arg for param in params}
            _check_scope(body, inner, names, False, unresolved)
        elif isinstance(node, ast.ClassDef):
            outer = [*node.decorator_list, *node.bases, *(keyword.value for keyword in node.keywords)]
            _check_scope(outer, enclosing, local, in_class, unresolved)
            _check_scope(node.body, inner, _scope_bindings(node.body), True, unresolved)
        elif isinstance(node, (ast.ListComp, ast.SetComp, ast.DictComp, ast.GeneratorExp)):
            first, *rest = node.generators
            _check_scope([first.iter], enclosing, local, in_class, unresolved)
            targets = _scope_bindings(generator.target for generator in node.generators)
            parts: List[ast.AST] = list(first.ifs)
            for generator in rest:
                parts.extend([generator.iter, *generator.ifs])
            if isinstance(node, ast.DictComp):
                parts.extend([node.key, node.value])
            else:
                parts.append(node.elt)
            _check_scope(parts, inner, targets, False, unresolved)


__all__ = ["KNOWN_IMPORTS", "SourceFormatter"]
