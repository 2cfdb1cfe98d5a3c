from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum, auto
from inspect import Parameter
from typing import Any, ClassVar, TypeAlias, TypeVar, get_type_hints

from plugwire._internal.markers import is_injected_annotation, strip_injected_annotation
from plugwire.exceptions import PlugwireDependencyInferenceError

T = TypeVar("T")

UserDependency: TypeAlias = Any
"""A dependency that been registered or trying to be resolved from the user's code."""

ConcreteTypeProvider: TypeAlias = type[T]
"""A concrete type that can be instantiated to produce a dependency."""

FactoryProvider: TypeAlias = Callable[..., T]
"""A factory function that produces a dependency."""

_MISSING_ANNOTATION: Any = object()
_HINT_ERRORS = (AttributeError, NameError, TypeError)


class Lifetime(str, Enum):
    """Define cache behavior for provider results."""

    TRANSIENT = "transient"
    """Disable caching and build a new value for every resolution call."""

    SINGLETON = "singleton"
    """Build the value once per container, through the full resolution pipeline.

    Resolution hooks (and therefore customizations) run for the first
    resolution only; later calls return the cached object.
    """


class ProviderKind(Enum):
    """Identify which provider source a spec carries."""

    INSTANCE = auto()
    CONCRETE_TYPE = auto()
    FACTORY = auto()


@dataclass(kw_only=True)
class ProviderSpec:
    """Describe how a single dependency key is produced and cached.

    Exactly one provider source is set, according to ``kind``. Concrete type
    specs are the ones customizations can act on, since their implementation
    type is known.
    """

    SLOT_COUNTER: ClassVar[int] = 0

    provides: UserDependency
    """The dependency key that this provider supplies."""
    kind: ProviderKind
    """Which of ``instance``, ``concrete_type`` or ``factory`` is set."""

    instance: Any = None
    """A pre-built value, for ``ProviderKind.INSTANCE``."""
    concrete_type: ConcreteTypeProvider[Any] | None = None
    """The class mapped to ``provides``, for ``ProviderKind.CONCRETE_TYPE``."""
    factory: FactoryProvider[Any] | None = None
    """A callable producing the value, for ``ProviderKind.FACTORY``."""
    lifetime: Lifetime = Lifetime.TRANSIENT
    """Caching behavior; ignored for instance specs."""

    slot: int = field(init=False)
    """A unique slot number assigned to this provider specification."""

    def __post_init__(self) -> None:
        self.__class__.SLOT_COUNTER += 1
        self.slot = self.SLOT_COUNTER


class ProvidersRegistrations:
    """Store provider specs indexed by dependency key.

    Registration keys are unique: adding a spec for an existing dependency key
    replaces the previous spec, which is how a base type is remapped to a new
    implementation.
    """

    def __init__(self) -> None:
        self._registrations_by_type: dict[UserDependency, ProviderSpec] = {}

    def add(self, spec: ProviderSpec) -> ProviderSpec | None:
        """Add a provider specification and return the one it replaced, if any.

        Args:
            spec: Provider specification to register.

        """
        previous_spec = self._registrations_by_type.get(spec.provides)
        self._registrations_by_type[spec.provides] = spec
        return previous_spec

    def find_by_type(self, dep_type: UserDependency) -> ProviderSpec | None:
        """Get a provider specification by dependency type, if it exists.

        Args:
            dep_type: Dependency type key to look up.

        """
        return self._registrations_by_type.get(dep_type)

    def __contains__(self, dep_type: object) -> bool:
        return dep_type in self._registrations_by_type

    def __len__(self) -> int:
        return len(self._registrations_by_type)


@dataclass(slots=True)
class ProviderDependency:
    """Represent a dependency key bound to a provider parameter."""

    provides: UserDependency
    parameter: Parameter

    @property
    def is_required(self) -> bool:
        """Whether the parameter has no default value."""
        return self.parameter.default is Parameter.empty


@dataclass(slots=True)
class InjectedMember:
    """Represent a class attribute populated by the member-injection pass."""

    name: str
    provides: UserDependency


@dataclass(slots=True)
class ProviderDependenciesExtractor:
    """Extracts constructor dependencies from user-defined provider objects."""

    def extract_from_concrete_type(
        self,
        concrete_type: ConcreteTypeProvider[Any],
    ) -> list[ProviderDependency]:
        """Extract dependencies from a concrete type's constructor.

        Args:
            concrete_type: Concrete class provider to inspect.

        """
        return self._extract_dependencies(
            provider=concrete_type,
            provider_name=concrete_type.__qualname__,
            hints_sources=(concrete_type.__init__, concrete_type.__new__),
        )

    def extract_from_factory(
        self,
        factory: FactoryProvider[Any],
    ) -> list[ProviderDependency]:
        """Extract dependencies from a factory-based provider.

        Args:
            factory: Factory provider callable to inspect.

        """
        return self._extract_dependencies(
            provider=factory,
            provider_name=getattr(factory, "__qualname__", repr(factory)),
            hints_sources=(factory,),
        )

    def _extract_dependencies(
        self,
        *,
        provider: Callable[..., Any],
        provider_name: str,
        hints_sources: tuple[Any, ...],
    ) -> list[ProviderDependency]:
        parameters = self._provider_parameters(provider)
        annotations, annotation_error = self._resolved_type_hints(hints_sources)
        dependencies: list[ProviderDependency] = []

        for parameter in parameters:
            if parameter.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD):
                continue
            provides = self._resolve_parameter_annotation(
                parameter=parameter,
                annotations=annotations,
                annotation_error=annotation_error,
                provider_name=provider_name,
            )
            if provides is _MISSING_ANNOTATION:
                continue

            dependencies.append(
                ProviderDependency(
                    provides=strip_injected_annotation(provides),
                    parameter=parameter,
                ),
            )

        return dependencies

    def _resolve_parameter_annotation(
        self,
        *,
        parameter: Parameter,
        annotations: dict[str, Any],
        annotation_error: Exception | None,
        provider_name: str,
    ) -> Any:
        annotation = annotations.get(parameter.name, _MISSING_ANNOTATION)
        if annotation is not _MISSING_ANNOTATION:
            return annotation

        raw_annotation = parameter.annotation
        if raw_annotation is not Parameter.empty and not isinstance(raw_annotation, str):
            return raw_annotation

        if parameter.default is not Parameter.empty:
            return _MISSING_ANNOTATION

        error_message = (
            f"Unable to infer dependency for required parameter '{parameter.name}' "
            f"in provider '{provider_name}'. Add a type annotation."
        )
        if annotation_error is None:
            raise PlugwireDependencyInferenceError(error_message)
        msg = f"{error_message} Original annotation error: {annotation_error}"
        raise PlugwireDependencyInferenceError(msg) from annotation_error

    def _provider_parameters(self, provider: Callable[..., Any]) -> tuple[Parameter, ...]:
        try:
            return tuple(inspect.signature(provider).parameters.values())
        except ValueError:
            # Builtin constructors without a text signature take no injectable arguments.
            return ()

    def _resolved_type_hints(
        self,
        hints_sources: tuple[Any, ...],
    ) -> tuple[dict[str, Any], Exception | None]:
        merged_annotations: dict[str, Any] = {}
        merged_error: Exception | None = None

        for source in hints_sources:
            try:
                source_annotations = get_type_hints(source, include_extras=True)
            except _HINT_ERRORS as error:
                if merged_error is None:
                    merged_error = error
                continue
            for parameter_name, parameter_annotation in source_annotations.items():
                merged_annotations.setdefault(parameter_name, parameter_annotation)

        return merged_annotations, merged_error


@dataclass(slots=True)
class InjectedMembersExtractor:
    """Extracts ``Injected[...]`` class attributes across a class hierarchy."""

    def extract(self, owner: type[Any]) -> list[InjectedMember]:
        """Return injectable members of ``owner``, subclasses overriding bases.

        Args:
            owner: Class whose annotations (including inherited ones) are scanned.

        Raises:
            PlugwireDependencyInferenceError: If an ``Injected`` annotation is
                declared as a string that cannot be evaluated.

        """
        try:
            hints = get_type_hints(owner, include_extras=True)
        except _HINT_ERRORS as error:
            return self._extract_from_raw_annotations(owner=owner, annotation_error=error)

        return [
            InjectedMember(name=name, provides=strip_injected_annotation(annotation))
            for name, annotation in hints.items()
            if is_injected_annotation(annotation)
        ]

    def _extract_from_raw_annotations(
        self,
        *,
        owner: type[Any],
        annotation_error: Exception,
    ) -> list[InjectedMember]:
        members: dict[str, InjectedMember] = {}
        for base in reversed(owner.__mro__):
            for name, annotation in inspect.get_annotations(base).items():
                if isinstance(annotation, str):
                    if "Injected[" in annotation:
                        msg = (
                            f"Unable to evaluate injected member '{name}' of "
                            f"'{owner.__qualname__}'. Original annotation error: "
                            f"{annotation_error}"
                        )
                        raise PlugwireDependencyInferenceError(msg) from annotation_error
                    continue
                if is_injected_annotation(annotation):
                    members[name] = InjectedMember(
                        name=name,
                        provides=strip_injected_annotation(annotation),
                    )
        return list(members.values())
