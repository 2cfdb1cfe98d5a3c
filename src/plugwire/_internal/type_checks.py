from __future__ import annotations

import types
from typing import Any, TypeGuard


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_final_class(candidate: type[Any]) -> bool:
    """Return true when a class itself was marked with ``typing.final``.

    The marker is read from the class namespace only: subclasses created at
    runtime from a marked class do not inherit it.
    """
    return candidate.__dict__.get("__final__", False) is True


def is_protocol_class(candidate: type[Any]) -> bool:
    """Return true when a class is a ``typing.Protocol`` definition, not an implementation."""
    return getattr(candidate, "_is_protocol", False) is True


__all__ = ["is_final_class", "is_protocol_class", "is_runtime_class"]
