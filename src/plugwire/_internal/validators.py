from __future__ import annotations

import inspect
from typing import Any

from plugwire._internal.type_checks import is_runtime_class
from plugwire.exceptions import PlugwireInvalidRegistrationError


class DependencyRegistrationValidator:
    """Validates dependency registrations before creating provider specs."""

    def validate_concrete_type(self, concrete_type: object, *, provides: Any) -> None:
        """Validate that a concrete provider is instantiable and fits its key."""
        if not inspect.isclass(concrete_type):
            msg = f"Concrete provider must be a class, got {concrete_type!r}."
            raise PlugwireInvalidRegistrationError(msg)

        if inspect.isabstract(concrete_type):
            msg = f"Concrete provider '{concrete_type.__qualname__}' cannot be an abstract class."
            raise PlugwireInvalidRegistrationError(msg)

        if is_runtime_class(provides) and not self._is_subclass(concrete_type, provides):
            msg = (
                f"Concrete provider '{concrete_type.__qualname__}' does not subclass "
                f"'{provides.__qualname__}'."
            )
            raise PlugwireInvalidRegistrationError(msg)

    def validate_factory(self, factory: object) -> None:
        """Validate that a factory provider is callable."""
        if not callable(factory):
            msg = f"Factory provider must be callable, got {factory!r}."
            raise PlugwireInvalidRegistrationError(msg)

    def _is_subclass(self, concrete_type: type[Any], provides: type[Any]) -> bool:
        try:
            return issubclass(concrete_type, provides)
        except TypeError:
            # Protocols without @runtime_checkable (or with data members) refuse issubclass().
            return True
