from __future__ import annotations

from pydantic_settings import BaseSettings

from plugwire._internal.type_checks import is_runtime_class


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether a class is a ``pydantic_settings.BaseSettings`` model.

    plugwire uses this integration for safe autoregistration: settings
    subclasses are registered through a zero-argument factory and cached as
    container singletons, so environment variables are read once.

    Args:
        candidate: Object to test.

    Returns:
        ``True`` when ``candidate`` is a runtime class and subclasses
        ``BaseSettings``; otherwise ``False``.

    """
    if not is_runtime_class(candidate):
        return False
    try:
        return issubclass(candidate, BaseSettings) and candidate is not BaseSettings
    except TypeError:
        return False


__all__ = ["is_pydantic_settings_subclass"]
