"""Identifier conversions shared by scaffolding, manifests and templates."""

from __future__ import annotations

import keyword
import re
from typing import List

_WORD_PATTERN = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")

# Names that cannot be used for generated parameters even though they are identifiers.
_RESERVED = {"self", "cls"}


def split_words(value: str) -> List[str]:
    """Split a human or code name on separators, case changes and digit runs."""
    return _WORD_PATTERN.findall(value)


def to_kebab(value: str) -> str:
    """``"My Cool Thing"`` -> ``"my-cool-thing"``."""
    return "-".join(word.lower() for word in split_words(value))


def to_snake(value: str) -> str:
    """``"withExec"`` -> ``"with_exec"``."""
    return "_".join(word.lower() for word in split_words(value))


def to_pascal(value: str) -> str:
    """``"my-cool-thing"`` -> ``"MyCoolThing"``."""
    return "".join(word[:1].upper() + word[1:].lower() for word in split_words(value))


def module_class_name(module_name: str) -> str:
    """Class name of the main object of a module: ``"my-cool thing"`` -> ``"MyCoolThing"``."""
    name = to_pascal(module_name) or "Module"
    return f"Module{name}" if name[0].isdigit() else name


def safe_identifier(value: str) -> str:
    """Return ``value`` usable as a Python parameter or attribute name."""
    if not value:
        return "_"
    if value[0].isdigit():
        value = f"_{value}"
    if keyword.iskeyword(value) or value in _RESERVED:
        return f"{value}_"
    return value


__all__ = ["module_class_name", "safe_identifier", "split_words", "to_kebab", "to_pascal", "to_snake"]
