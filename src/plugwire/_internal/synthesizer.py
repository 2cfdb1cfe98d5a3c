from __future__ import annotations

import inspect
import logging
import threading
import types
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from plugwire._internal.capabilities import CapabilityInspector, CapabilityMember, MemberKind
from plugwire._internal.customizations import CapabilityDescriptor
from plugwire._internal.type_checks import is_final_class, is_runtime_class
from plugwire.exceptions import (
    PlugwireNonExtensibleBaseError,
    PlugwireUnsupportedCapabilityError,
)

logger = logging.getLogger(__name__)

SYNTHESIZED_BASE_ATTR = "__plugwire_base__"
SYNTHESIZED_CAPABILITIES_ATTR = "__plugwire_capabilities__"


@dataclass(frozen=True, slots=True)
class SynthesizedTypeKey:
    """Cache key of a synthesized type.

    The base implementation type is part of the key, so remapping a declared
    type never reuses a type synthesized against the previous implementation.
    """

    base_type: type[Any]
    capabilities: tuple[CapabilityDescriptor, ...]


class TypeSynthesizer:
    """Create, and cache, subclasses that combine a base type with capabilities.

    The synthesized class subclasses the base implementation first and then
    every capability, so ``isinstance`` holds for all of them. It pins the
    base's ``__init__`` so the constructor signature the container injects
    is unchanged. Capability members the base does not already provide are
    implemented with storage-backed properties.

    The cache is shared by all resolutions and guarded by a lock: concurrent
    requests for one key all receive the type stored by the first one.
    """

    def __init__(self, inspector: CapabilityInspector | None = None) -> None:
        self._inspector = inspector or CapabilityInspector()
        self._types_by_key: dict[SynthesizedTypeKey, type[Any]] = {}
        self._lock = threading.Lock()

    def synthesize(
        self,
        base_type: type[Any],
        capabilities: Iterable[CapabilityDescriptor],
    ) -> type[Any]:
        """Return the type combining ``base_type`` with ``capabilities``.

        Args:
            base_type: Implementation type the container currently maps the
                declared type to.
            capabilities: Capabilities in insertion order.

        Raises:
            PlugwireNonExtensibleBaseError: If ``base_type`` cannot be
                subclassed with these capabilities.
            PlugwireUnsupportedCapabilityError: If a capability member cannot be
                implemented with storage, or two capabilities conflict.

        """
        key = SynthesizedTypeKey(base_type=base_type, capabilities=tuple(capabilities))
        cached = self._types_by_key.get(key)
        if cached is not None:
            return cached

        with self._lock:
            cached = self._types_by_key.get(key)
            if cached is not None:
                return cached
            synthesized = self._build(key)
            self._types_by_key[key] = synthesized
            return synthesized

    def __len__(self) -> int:
        return len(self._types_by_key)

    def _build(self, key: SynthesizedTypeKey) -> type[Any]:
        base_type = key.base_type
        self._validate_base(base_type)

        capability_bases: list[type[Any]] = []
        members: dict[str, CapabilityMember] = {}
        for descriptor in key.capabilities:
            capability_members = self._inspector.members(descriptor.capability)
            capability = descriptor.capability
            if capability in base_type.__mro__:
                continue
            if capability not in capability_bases:
                capability_bases.append(capability)
            for member in capability_members:
                self._collect_member(
                    base_type=base_type,
                    descriptor=descriptor,
                    member=member,
                    members=members,
                )

        for member in members.values():
            self._check_shadowed_definitions(member=member, capability_bases=capability_bases)

        namespace = self._build_namespace(base_type=base_type, members=members.values())
        namespace[SYNTHESIZED_CAPABILITIES_ATTR] = key.capabilities
        name = base_type.__name__ + "With" + "".join(item.name for item in key.capabilities)

        try:
            synthesized = types.new_class(
                name,
                (base_type, *capability_bases),
                exec_body=lambda body: body.update(namespace),
            )
        except TypeError as error:
            msg = (
                f"Cannot derive a subclass of '{base_type.__qualname__}' "
                f"with capabilities: {error}"
            )
            raise PlugwireNonExtensibleBaseError(msg) from error

        if inspect.isabstract(synthesized):
            missing = ", ".join(sorted(synthesized.__abstractmethods__))
            msg = (
                f"Type synthesized from '{base_type.__qualname__}' is still abstract; "
                f"unimplemented members: {missing}."
            )
            raise PlugwireUnsupportedCapabilityError(msg)

        logger.info(
            "Synthesized type %s from base=%s capabilities=[%s] storage_members=%d",
            synthesized.__qualname__,
            base_type.__qualname__,
            ", ".join(item.name for item in key.capabilities),
            len(members),
        )
        return synthesized

    def _validate_base(self, base_type: Any) -> None:
        if not is_runtime_class(base_type):
            msg = f"Base implementation {base_type!r} is not a class."
            raise PlugwireNonExtensibleBaseError(msg)
        if is_final_class(base_type):
            msg = f"Base implementation '{base_type.__qualname__}' is marked @final."
            raise PlugwireNonExtensibleBaseError(msg)

    def _collect_member(
        self,
        *,
        base_type: type[Any],
        descriptor: CapabilityDescriptor,
        member: CapabilityMember,
        members: dict[str, CapabilityMember],
    ) -> None:
        if _is_provided_by(base_type, member.name):
            return

        existing = members.get(member.name)
        if existing is not None:
            if existing.owner is member.owner:
                return
            msg = (
                f"Capability '{descriptor.name}' declares member '{member.name}' "
                f"that conflicts with '{existing.owner.__qualname__}.{member.name}'."
            )
            raise PlugwireUnsupportedCapabilityError(msg)

        if not member.kind.is_storage_backed:
            msg = (
                f"Capability '{descriptor.name}' requires method '{member.name}', "
                f"which needs an implementation on '{base_type.__qualname__}'."
            )
            raise PlugwireUnsupportedCapabilityError(msg)

        members[member.name] = member

    def _check_shadowed_definitions(
        self,
        *,
        member: CapabilityMember,
        capability_bases: list[type[Any]],
    ) -> None:
        # A storage property would hide a concrete definition from another capability.
        for capability in capability_bases:
            if member.owner in capability.__mro__:
                continue
            owner = _concrete_owner(capability, member.name)
            if owner is None:
                continue
            msg = (
                f"Capability '{capability.__qualname__}' defines '{member.name}' on "
                f"'{owner.__qualname__}', which conflicts with the member declared by "
                f"'{member.owner.__qualname__}'."
            )
            raise PlugwireUnsupportedCapabilityError(msg)

    def _build_namespace(
        self,
        *,
        base_type: type[Any],
        members: Iterable[CapabilityMember],
    ) -> dict[str, Any]:
        namespace: dict[str, Any] = {
            "__module__": base_type.__module__,
            "__init__": base_type.__init__,
            "__doc__": base_type.__doc__,
            SYNTHESIZED_BASE_ATTR: base_type,
        }
        for member in members:
            namespace[member.name] = _storage_property(member)
        return namespace


def synthesized_base(candidate: type[Any]) -> type[Any] | None:
    """Return the base implementation of a synthesized type, or ``None`` for other types."""
    return candidate.__dict__.get(SYNTHESIZED_BASE_ATTR)


def _is_provided_by(base_type: type[Any], name: str) -> bool:
    for owner in base_type.__mro__:
        if owner is object:
            continue
        if name in owner.__dict__ or name in inspect.get_annotations(owner):
            return not getattr(owner.__dict__.get(name), "__isabstractmethod__", False)
    return False


def _concrete_owner(capability: type[Any], name: str) -> type[Any] | None:
    for owner in capability.__mro__:
        if owner is object or name not in owner.__dict__:
            continue
        if getattr(owner.__dict__[name], "__isabstractmethod__", False):
            return None
        return owner
    return None


def _storage_property(member: CapabilityMember) -> property:
    name = member.name
    kind = member.kind
    default = member.default if member.has_default else None

    def _get(self: Any) -> Any:
        return self.__dict__.get(name, default)

    def _set(self: Any, value: Any) -> None:
        self.__dict__[name] = value

    def _delete(self: Any) -> None:
        self.__dict__.pop(name, None)

    _get.__name__ = name
    return property(_get, _set, _delete, doc=f"Storage-backed {kind.value} '{name}'.")
