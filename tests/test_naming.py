"""Tests for modgen.naming."""

from __future__ import annotations

import pytest

from modgen.naming import module_class_name, safe_identifier, split_words, to_kebab, to_pascal, to_snake


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("My Cool Thing", ["My", "Cool", "Thing"]),
        ("withExec", ["with", "Exec"]),
        ("loadContainerFromID", ["load", "Container", "From", "ID"]),
        ("my_cool-thing2", ["my", "cool", "thing", "2"]),
        ("HTTPServer", ["HTTP", "Server"]),
    ],
)
def test_split_words_handles_separators_and_case(value: str, expected: list[str]) -> None:
    assert split_words(value) == expected


def test_name_derivation_is_deterministic_across_conventions() -> None:
    assert to_kebab("My Cool Thing") == "my-cool-thing"
    assert to_pascal("My Cool Thing") == "MyCoolThing"
    assert to_snake("My Cool Thing") == "my_cool_thing"
    assert to_kebab("  My   Cool\tThing ") == to_kebab("My Cool Thing")


def test_module_class_name_falls_back_for_unusable_names() -> None:
    assert module_class_name("my-cool thing") == "MyCoolThing"
    assert module_class_name("") == "Module"
    assert module_class_name("!!!") == "Module"
    assert module_class_name("3d printer") == "Module3DPrinter"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("from", "from_"),
        ("class", "class_"),
        ("self", "self_"),
        ("cls", "cls_"),
        ("2fa", "_2fa"),
        ("address", "address"),
        ("", "_"),
    ],
)
def test_safe_identifier(value: str, expected: str) -> None:
    assert safe_identifier(value) == expected
