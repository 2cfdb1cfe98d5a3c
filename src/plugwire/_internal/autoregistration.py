from __future__ import annotations

import datetime
import decimal
import inspect
import pathlib
import uuid
from dataclasses import dataclass
from typing import Any, TypeGuard

from plugwire._internal.type_checks import is_protocol_class, is_runtime_class

_VALUE_TYPES: tuple[type[Any], ...] = (
    pathlib.PurePath,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    decimal.Decimal,
)


@dataclass(frozen=True, slots=True)
class ConcreteTypeAutoregistrationPolicy:
    """Decide which unregistered keys the container may construct on demand.

    Only plain user classes qualify. Value types (paths, dates, UUIDs and
    the like) are data rather than services and must be registered as
    instances.
    """

    value_types: tuple[type[Any], ...] = _VALUE_TYPES

    def is_eligible_concrete(self, candidate: object) -> TypeGuard[type[Any]]:
        """Return true when ``candidate`` can be autoregistered as its own implementation.

        Args:
            candidate: Dependency key being resolved.

        """
        return self.ineligibility_reason(candidate) is None

    def ineligibility_reason(self, candidate: object) -> str | None:
        """Explain why ``candidate`` cannot be autoregistered, or return ``None``.

        Args:
            candidate: Dependency key being resolved.

        """
        if not is_runtime_class(candidate):
            return "it is not a class"
        if candidate.__module__ == "builtins":
            return "builtin types are never autoregistered"
        if is_protocol_class(candidate):
            return "protocols need an implementation mapped with add_concrete()"
        if inspect.isabstract(candidate):
            return "abstract classes need an implementation mapped with add_concrete()"
        if issubclass(candidate, type):
            return "metaclasses are never autoregistered"
        if issubclass(candidate, self.value_types):
            return "value types must be registered with add_instance()"
        return None
