from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from typing_extensions import Self

T = TypeVar("T")

Initializer = Callable[[Any], object]
"""A callable run against every freshly constructed instance of a customized type."""


@dataclass(frozen=True, slots=True)
class CapabilityDescriptor:
    """Identify one capability class added to a customized type.

    Descriptors are hashable and compare by the wrapped capability, so adding
    the same capability twice is a no-op. Unhashable values are accepted too
    and are rejected only when a type is synthesized from them.
    """

    capability: Any

    def __hash__(self) -> int:
        try:
            return hash(self.capability)
        except TypeError:
            return hash(type(self.capability))

    @property
    def name(self) -> str:
        """Return a readable name for messages and synthesized type names."""
        return getattr(self.capability, "__name__", repr(self.capability))


class CustomizationSpec(Generic[T]):
    """Record how instances of one declared type are augmented on resolution.

    A spec holds an ordered list of initializers, an ordered set of
    capabilities and a tri-state build-up override. Builder methods only
    record metadata and return the spec for chaining; invalid capabilities
    are reported when the type is first resolved.

    Specs never store the implementation type of the declared type: it is
    looked up from the container at every resolution.

    Examples:
        .. code-block:: python

            customizer.setup(Customer).initialize_with(
                lambda customer: setattr(customer, "first_name", "custom"),
            ).extend_with(HasLoyaltyPoints).build_up(True)

    """

    def __init__(self, declared_type: type[T]) -> None:
        self._declared_type = declared_type
        self._initializers: list[Initializer] = []
        self._capabilities: dict[CapabilityDescriptor, None] = {}
        self._build_up_override: bool | None = None

    def initialize_with(self, action: Callable[[T], object]) -> Self:
        """Append an initializer run after construction, before member injection.

        Initializers run in registration order on every resolution.

        Args:
            action: Callable receiving the new instance; its return value is
                ignored.

        """
        self._initializers.append(action)
        return self

    def extend_with(self, capability: type[Any]) -> Self:
        """Add a capability the resolved instances must expose.

        Args:
            capability: Class (protocol, ABC or plain mixin) whose members are
                added to the resolved type. Adding it again is a no-op.

        """
        self._capabilities.setdefault(CapabilityDescriptor(capability), None)
        return self

    def build_up(self, enabled: bool = True) -> Self:  # noqa: FBT001,FBT002
        """Override the default member-injection policy for this type.

        Args:
            enabled: Whether ``Injected[...]`` members of resolved instances
                are populated.

        """
        self._build_up_override = enabled
        return self

    def effective_build_up(self, default: bool) -> bool:  # noqa: FBT001
        """Return the override when set, otherwise ``default``."""
        if self._build_up_override is None:
            return default
        return self._build_up_override

    @property
    def declared_type(self) -> type[T]:
        """The type this spec was set up for."""
        return self._declared_type

    @property
    def initializers(self) -> tuple[Initializer, ...]:
        """Initializers in registration order."""
        return tuple(self._initializers)

    @property
    def capabilities(self) -> tuple[CapabilityDescriptor, ...]:
        """Capabilities in insertion order, without duplicates."""
        return tuple(self._capabilities)

    @property
    def build_up_override(self) -> bool | None:
        """The per-type override, or ``None`` to inherit the default."""
        return self._build_up_override

    def __repr__(self) -> str:
        return (
            f"CustomizationSpec({self._declared_type.__qualname__}, "
            f"initializers={len(self._initializers)}, "
            f"capabilities=[{', '.join(item.name for item in self._capabilities)}], "
            f"build_up={self._build_up_override})"
        )


class CustomizationRegistry:
    """Store one ``CustomizationSpec`` per declared type.

    Lookups are always by the declared type, never by the implementation the
    container currently maps it to.
    """

    def __init__(self) -> None:
        self._specs: dict[Any, CustomizationSpec[Any]] = {}

    def setup(self, declared_type: type[T]) -> CustomizationSpec[T]:
        """Return the spec for ``declared_type``, creating an empty one on first call.

        Args:
            declared_type: Type applications ask the container to resolve.

        """
        spec = self._specs.get(declared_type)
        if spec is None:
            spec = self._specs.setdefault(declared_type, CustomizationSpec(declared_type))
        return spec

    def get_spec(self, declared_type: Any) -> CustomizationSpec[Any] | None:
        """Return the spec for ``declared_type``, or ``None`` to resolve unmodified.

        Args:
            declared_type: Dependency key being resolved.

        """
        try:
            return self._specs.get(declared_type)
        except TypeError:
            # Unhashable dependency keys can never have been set up.
            return None

    def __contains__(self, declared_type: object) -> bool:
        return self.get_spec(declared_type) is not None

    def __len__(self) -> int:
        return len(self._specs)
