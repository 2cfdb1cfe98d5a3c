from __future__ import annotations

import inspect
import re
from collections.abc import Callable, Iterator
from typing import Any

import pytest

import plugwire
from plugwire import CustomizationSpec, Customizer

_DOCUMENTED_DUNDERS = frozenset({"__init__", "__call__"})
_ARG_ENTRY = re.compile(r"^ {4}\*{0,2}(\w+)")


def _documented_functions() -> Iterator[tuple[str, Callable[..., Any]]]:
    for export_name in sorted(plugwire.__all__):
        exported = getattr(plugwire, export_name)
        if inspect.isfunction(exported):
            yield export_name, exported
        if not inspect.isclass(exported):
            continue
        for name, member in exported.__dict__.items():
            if name.startswith("_") and name not in _DOCUMENTED_DUNDERS:
                continue
            function = member
            if isinstance(member, staticmethod | classmethod):
                function = member.__func__
            if inspect.isfunction(function):
                yield f"{export_name}.{name}", function


def _documented_arguments(docstring: str) -> list[str] | None:
    lines = docstring.splitlines()
    if "Args:" not in lines:
        return None
    names: list[str] = []
    for line in lines[lines.index("Args:") + 1 :]:
        if not line.strip():
            break
        match = _ARG_ENTRY.match(line)
        if match is not None:
            names.append(match.group(1))
    return names


def test_exported_objects_have_docstrings() -> None:
    missing = [
        name for name in sorted(plugwire.__all__) if not inspect.getdoc(getattr(plugwire, name))
    ]

    assert missing == []


def test_public_methods_of_exported_classes_have_docstrings() -> None:
    missing = [
        qualified_name
        for qualified_name, function in _documented_functions()
        if not function.__name__.startswith("_") and not inspect.getdoc(function)
    ]

    assert missing == []


def test_args_sections_match_signatures() -> None:
    mismatched: list[str] = []
    checked = 0
    for qualified_name, function in _documented_functions():
        documented = _documented_arguments(inspect.getdoc(function) or "")
        if documented is None:
            continue
        checked += 1
        parameters = [
            name for name in inspect.signature(function).parameters if name not in {"self", "cls"}
        ]
        if documented != parameters:
            mismatched.append(f"{qualified_name}: documented={documented} actual={parameters}")

    assert checked > 0
    assert mismatched == []


@pytest.mark.parametrize(
    "method",
    [
        CustomizationSpec.initialize_with,
        CustomizationSpec.extend_with,
        CustomizationSpec.build_up,
        Customizer.set_default_build_up,
    ],
    ids=lambda method: method.__qualname__,
)
def test_builder_methods_are_documented_as_chainable(method: Callable[..., Any]) -> None:
    assert inspect.getdoc(method)
    assert inspect.signature(method).return_annotation == "Self"
