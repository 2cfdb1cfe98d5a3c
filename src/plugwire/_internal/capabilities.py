from __future__ import annotations

import abc
import inspect
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, ClassVar, Generic, Protocol, get_origin

from plugwire._internal.type_checks import is_protocol_class, is_runtime_class
from plugwire.exceptions import PlugwireUnsupportedCapabilityError

_NO_DEFAULT: Any = object()
_FRAMEWORK_BASES: frozenset[type[Any]] = frozenset({object, Protocol, Generic, abc.ABC})  # type: ignore[arg-type]
_IGNORED_ATTRIBUTE_NAMES = frozenset({"__slots__", "__weakref__", "__dict__"})


class MemberKind(Enum):
    """Classify a capability member by how it can be implemented."""

    ATTRIBUTE = "attribute"
    """Annotated attribute; implemented with storage."""

    PROPERTY = "property"
    """Abstract or protocol property; implemented with storage."""

    METHOD = "method"
    """Abstract or protocol method; needs real logic and cannot be synthesized."""

    @property
    def is_storage_backed(self) -> bool:
        """Whether the synthesizer can implement members of this kind."""
        return self is not MemberKind.METHOD


@dataclass(frozen=True, slots=True)
class CapabilityMember:
    """One member a capability requires from the types it is added to."""

    name: str
    kind: MemberKind
    owner: type[Any]
    """Class in the capability hierarchy that declares the member."""
    default: Any = _NO_DEFAULT

    @property
    def has_default(self) -> bool:
        """Whether the capability declares a class-level default value."""
        return self.default is not _NO_DEFAULT


class CapabilityInspector:
    """Compute the members a capability class asks the synthesizer to implement.

    Only members without a concrete implementation are reported: annotated
    attributes, abstract (or protocol) properties and abstract (or protocol)
    methods. Concrete methods and properties of plain mixins are inherited by
    the synthesized type as they are.
    """

    def __init__(self) -> None:
        self._members_by_capability: dict[type[Any], tuple[CapabilityMember, ...]] = {}

    def members(self, capability: Any) -> tuple[CapabilityMember, ...]:
        """Return the members of ``capability`` in declaration order, bases first.

        Args:
            capability: Candidate capability class.

        Raises:
            PlugwireUnsupportedCapabilityError: If ``capability`` is not a class.

        """
        if not is_runtime_class(capability):
            msg = f"Capability {capability!r} is not a class."
            raise PlugwireUnsupportedCapabilityError(msg)

        cached = self._members_by_capability.get(capability)
        if cached is None:
            cached = self._collect_members(capability)
            self._members_by_capability[capability] = cached
        return cached

    def _collect_members(self, capability: type[Any]) -> tuple[CapabilityMember, ...]:
        members: dict[str, CapabilityMember] = {}
        for owner in reversed(capability.__mro__):
            if owner in _FRAMEWORK_BASES:
                continue
            declared_in_protocol = is_protocol_class(owner)
            for name, annotation in inspect.get_annotations(owner).items():
                if _is_private(name) or _is_class_var(annotation):
                    continue
                members[name] = CapabilityMember(
                    name=name,
                    kind=MemberKind.ATTRIBUTE,
                    owner=owner,
                    default=self._attribute_default(owner=owner, name=name),
                )
            for name, value in owner.__dict__.items():
                if _is_private(name) or name in _IGNORED_ATTRIBUTE_NAMES:
                    continue
                member = self._member_from_value(
                    owner=owner,
                    name=name,
                    value=value,
                    declared_in_protocol=declared_in_protocol,
                )
                if member is not None:
                    members[name] = member
                elif name in members and members[name].kind is MemberKind.ATTRIBUTE:
                    default = self._attribute_default(owner=owner, name=name)
                    if default is not _NO_DEFAULT:
                        members[name] = replace(members[name], default=default)
                elif name in members:
                    # A concrete override in a subclass implements the inherited member.
                    del members[name]
        return tuple(members.values())

    def _member_from_value(
        self,
        *,
        owner: type[Any],
        name: str,
        value: Any,
        declared_in_protocol: bool,
    ) -> CapabilityMember | None:
        if isinstance(value, property):
            if declared_in_protocol or _is_abstract(value):
                return CapabilityMember(name=name, kind=MemberKind.PROPERTY, owner=owner)
            return None
        function = value.__func__ if isinstance(value, classmethod | staticmethod) else value
        if inspect.isfunction(function) and (declared_in_protocol or _is_abstract(function)):
            return CapabilityMember(name=name, kind=MemberKind.METHOD, owner=owner)
        return None

    def _attribute_default(self, *, owner: type[Any], name: str) -> Any:
        if name not in owner.__dict__:
            return _NO_DEFAULT
        value = owner.__dict__[name]
        if inspect.isfunction(value) or hasattr(type(value), "__get__"):
            return _NO_DEFAULT
        return value


def _is_private(name: str) -> bool:
    return name.startswith("_")


def _is_class_var(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or get_origin(annotation) is ClassVar


def _is_abstract(value: Any) -> bool:
    return getattr(value, "__isabstractmethod__", False) is True
