from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from plugwire.exceptions import PlugwireCircularDependencyError

# Context variable for resolution tracking (isolated per thread and per async task).
_resolution_stack: ContextVar[tuple[Any, ...]] = ContextVar(
    "plugwire_resolution_stack",
    default=(),
)


@contextmanager
def resolution_frame(dependency: Any) -> Iterator[None]:
    """Push ``dependency`` on the current context's resolution stack.

    Raises:
        PlugwireCircularDependencyError: If ``dependency`` is already being
            resolved further up the same stack.

    """
    stack = _resolution_stack.get()
    if dependency in stack:
        chain = " -> ".join(_describe(key) for key in (*stack, dependency))
        msg = f"Circular dependency detected: {chain}."
        raise PlugwireCircularDependencyError(msg)

    token = _resolution_stack.set((*stack, dependency))
    try:
        yield
    finally:
        _resolution_stack.reset(token)


def _describe(dependency: Any) -> str:
    return getattr(dependency, "__qualname__", repr(dependency))
