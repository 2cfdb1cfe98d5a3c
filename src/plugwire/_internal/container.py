from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable
from inspect import Parameter
from typing import TYPE_CHECKING, Any, Literal, TypeAlias, TypeVar, cast, get_type_hints, overload

from plugwire._internal.autoregistration import ConcreteTypeAutoregistrationPolicy
from plugwire._internal.integrations.pydantic_settings import is_pydantic_settings_subclass
from plugwire._internal.providers import (
    FactoryProvider,
    InjectedMember,
    InjectedMembersExtractor,
    Lifetime,
    ProviderDependenciesExtractor,
    ProviderDependency,
    ProviderKind,
    ProviderSpec,
    ProvidersRegistrations,
)
from plugwire._internal.resolution_stack import resolution_frame
from plugwire._internal.validators import DependencyRegistrationValidator
from plugwire.exceptions import (
    PlugwireDependencyNotRegisteredError,
    PlugwireInvalidRegistrationError,
)

if TYPE_CHECKING:
    from plugwire._internal.settings import PlugwireSettings

T = TypeVar("T")

ResolutionHook: TypeAlias = Callable[[Any, Callable[[], Any]], Any]
"""A callable invoked around every ``resolve`` call as ``hook(dependency, proceed)``.

``proceed()`` runs the next hook, or the registered provider for the innermost
hook. A hook may return the result of ``proceed()``, or build the value itself.
"""

logger = logging.getLogger(__name__)


class Container:
    """Manage dependency registration, resolution and member injection.

    Dependency keys are usually concrete types, protocols, or
    ``typing.Annotated`` tokens. The mapping from a key to its implementation
    can be changed at any time with ``add_concrete``; every resolution reads
    the mapping that is current at that moment.

    Resolving a concrete binding constructs the implementation with
    constructor injection (parameters resolved by annotation), then runs the
    member-injection pass (``build_up``) that populates ``Injected[...]`` class
    attributes. Resolution hooks registered with ``add_resolution_hook`` wrap
    every resolution, including nested ones, which is how customizations are
    spliced into the pipeline.

    Examples:
        .. code-block:: python

            container = Container()
            container.add_concrete(SqlRepo, provides=Repo)
            repo = container.resolve(Repo)

    """

    def __init__(
        self,
        *,
        default_lifetime: Lifetime = Lifetime.TRANSIENT,
        autoregister_concrete_types: bool = True,
    ) -> None:
        """Initialize a container and configure default registration behavior.

        Args:
            default_lifetime: Lifetime used by registrations that omit
                ``lifetime`` and by autoregistered concrete types.
            autoregister_concrete_types: Enable on-demand concrete type
                autoregistration during resolution. Disable for strict mode
                where every dependency must be registered explicitly.

        Notes:
            The container registers itself under ``Container`` so classes can
            depend on it.

        """
        self._default_lifetime = default_lifetime
        self._autoregister_concrete_types = autoregister_concrete_types

        self._concrete_autoregistration_policy = ConcreteTypeAutoregistrationPolicy()
        self._provider_dependencies_extractor = ProviderDependenciesExtractor()
        self._injected_members_extractor = InjectedMembersExtractor()
        self._dependency_registration_validator = DependencyRegistrationValidator()
        self._providers_registrations = ProvidersRegistrations()

        self._construction_plans: dict[Any, list[ProviderDependency]] = {}
        self._injection_plans: dict[type[Any], list[InjectedMember]] = {}
        self._resolution_hooks: tuple[ResolutionHook, ...] = ()
        self._singletons: dict[int, Any] = {}
        self._lock = threading.RLock()

        self.add_instance(self, provides=Container)

    @classmethod
    def from_settings(cls, settings: PlugwireSettings) -> Container:
        """Create a container configured from ``PlugwireSettings``.

        Args:
            settings: Settings providing ``default_lifetime`` and
                ``autoregister_concrete_types``.

        """
        return cls(
            default_lifetime=settings.default_lifetime,
            autoregister_concrete_types=settings.autoregister_concrete_types,
        )

    # region Registration Methods
    def add_instance(
        self,
        instance: T,
        *,
        provides: Any | Literal["infer"] = "infer",
    ) -> None:
        """Register a pre-built instance as a provider.

        Re-registering the same dependency key overrides the previous binding.
        Customizations never change instance bindings since there is nothing to
        construct.

        Args:
            instance: Instance value to return on resolution.
            provides: Dependency key to bind. Use ``"infer"`` to bind by
                ``type(instance)``.

        Raises:
            PlugwireInvalidRegistrationError: If ``provides`` is ``None``.

        """
        provides_value = cast("Any", provides)
        if provides_value == "infer":
            resolved_provides: Any = type(instance)
        elif provides_value is not None:
            resolved_provides = provides_value
        else:
            msg = "add_instance() parameter 'provides' must not be None; use 'infer'."
            raise PlugwireInvalidRegistrationError(msg)

        self._register(
            ProviderSpec(
                provides=resolved_provides,
                kind=ProviderKind.INSTANCE,
                instance=instance,
            ),
        )

    def add_concrete(
        self,
        concrete_type: type[Any],
        *,
        provides: Any | Literal["infer"] = "infer",
        lifetime: Lifetime | Literal["from_container"] = "from_container",
    ) -> None:
        """Map a dependency key to a concrete implementation type.

        Calling this again for the same key remaps it: later resolutions use
        the new implementation, and customizations declared for the key are
        applied on top of it.

        Args:
            concrete_type: Concrete class to instantiate.
            provides: Dependency key produced by this provider. ``"infer"`` uses
                ``concrete_type`` directly.
            lifetime: Provider lifetime, or ``"from_container"`` to inherit the
                container default.

        Raises:
            PlugwireInvalidRegistrationError: If ``concrete_type`` is not a
                non-abstract class, or does not subclass a class ``provides``.

        Examples:
            .. code-block:: python

                container.add_concrete(SqlRepo, provides=Repo)
                container.add_concrete(CachedRepo, provides=Repo)  # remap

        """
        resolved_provides = self._resolve_registration_provides(
            provides=provides,
            default=concrete_type,
            method_name="add_concrete",
        )
        self._dependency_registration_validator.validate_concrete_type(
            concrete_type,
            provides=resolved_provides,
        )
        self._register(
            ProviderSpec(
                provides=resolved_provides,
                kind=ProviderKind.CONCRETE_TYPE,
                concrete_type=concrete_type,
                lifetime=self._resolve_registration_lifetime(lifetime),
            ),
        )

    def add_factory(
        self,
        factory: FactoryProvider[Any],
        *,
        provides: Any | Literal["infer"] = "infer",
        lifetime: Lifetime | Literal["from_container"] = "from_container",
    ) -> None:
        """Register a factory callable as a provider.

        Factory parameters are resolved by annotation like constructor
        parameters.

        Args:
            factory: Callable building the dependency.
            provides: Dependency key produced by the factory. ``"infer"`` reads
                the factory's return annotation.
            lifetime: Provider lifetime, or ``"from_container"`` to inherit the
                container default.

        Raises:
            PlugwireInvalidRegistrationError: If ``factory`` is not callable or
                ``provides`` cannot be inferred.

        """
        self._dependency_registration_validator.validate_factory(factory)
        provides_value = cast("Any", provides)
        if provides_value == "infer":
            provides_value = self._infer_factory_return_type(factory)
        resolved_provides = self._resolve_registration_provides(
            provides=provides_value,
            default=None,
            method_name="add_factory",
        )
        self._register(
            ProviderSpec(
                provides=resolved_provides,
                kind=ProviderKind.FACTORY,
                factory=factory,
                lifetime=self._resolve_registration_lifetime(lifetime),
            ),
        )

    def add_resolution_hook(self, hook: ResolutionHook) -> None:
        """Register a hook invoked around every ``resolve`` call.

        Hooks are chained in registration order: the first registered hook is
        the outermost. A hook receives the requested dependency key and a
        ``proceed`` callable that continues the chain.

        Args:
            hook: Callable accepting ``(dependency, proceed)``.

        Examples:
            .. code-block:: python

                def trace(dependency: Any, proceed: Callable[[], Any]) -> Any:
                    print(f"resolving {dependency!r}")
                    return proceed()


                container.add_resolution_hook(trace)

        """
        with self._lock:
            self._resolution_hooks = (*self._resolution_hooks, hook)

    def is_registered(self, dependency: Any) -> bool:
        """Return whether ``dependency`` has an explicit or autoregistered binding.

        Args:
            dependency: Dependency key to check.

        """
        return dependency in self._providers_registrations

    def has_factory_binding(self, dependency: Any) -> bool:
        """Return whether ``dependency`` is currently produced by a factory.

        Args:
            dependency: Dependency key to check.

        """
        spec = self._providers_registrations.find_by_type(dependency)
        return spec is not None and spec.kind is ProviderKind.FACTORY

    def get_implementation(self, dependency: Any) -> type[Any] | None:
        """Return the concrete type ``dependency`` is mapped to right now.

        This is a live lookup: a later ``add_concrete`` call for the same key
        changes the answer.

        Args:
            dependency: Dependency key to look up.

        Returns:
            The mapped class, the key itself for unregistered classes that
            would be autoregistered, or ``None`` for instance and factory
            bindings and for keys that cannot be constructed.

        """
        spec = self._providers_registrations.find_by_type(dependency)
        if spec is not None:
            if spec.kind is ProviderKind.CONCRETE_TYPE:
                return spec.concrete_type
            return None
        if is_pydantic_settings_subclass(dependency):
            return None
        if self._autoregister_concrete_types and (
            self._concrete_autoregistration_policy.is_eligible_concrete(dependency)
        ):
            return dependency
        return None

    # endregion Registration Methods

    @overload
    def resolve(self, dependency: type[T]) -> T: ...

    @overload
    def resolve(self, dependency: Any) -> Any: ...

    def resolve(self, dependency: Any) -> Any:
        """Resolve a dependency through the hook chain.

        Args:
            dependency: Dependency key to resolve.

        Returns:
            The value produced for ``dependency``. Transient bindings produce a
            new object on every call.

        Raises:
            PlugwireDependencyNotRegisteredError: If the key has no provider
                and cannot be autoregistered.
            PlugwireCircularDependencyError: If the key is already being
                resolved in the current context.

        Examples:
            .. code-block:: python

                service = container.resolve(Service)

        """
        with resolution_frame(dependency):
            spec = self._find_or_autoregister(dependency)
            if spec.kind is not ProviderKind.INSTANCE and spec.lifetime is Lifetime.SINGLETON:
                return self._resolve_singleton(spec)
            return self._resolve_through_hooks(spec)

    def construct(self, concrete_type: type[T]) -> T:
        """Instantiate ``concrete_type`` with constructor injection only.

        Required constructor parameters are resolved by annotation. Parameters
        with defaults are resolved only when their key is registered. No
        member injection is performed.

        Args:
            concrete_type: Class to instantiate; it does not need to be
                registered.

        Raises:
            PlugwireDependencyInferenceError: If a required parameter has no
                usable annotation.

        """
        plan = self._construction_plans.get(concrete_type)
        if plan is None:
            plan = self._provider_dependencies_extractor.extract_from_concrete_type(concrete_type)
            self._construction_plans[concrete_type] = plan
        return cast("T", self._call_with_dependencies(concrete_type, plan))

    def build_up(self, instance: T) -> T:
        """Run the member-injection pass on an existing instance.

        Every ``Injected[...]`` class attribute declared anywhere in the
        instance's class hierarchy is set to the value resolved for its inner
        type. Calling it again re-resolves and reassigns the same members.

        Args:
            instance: Object to populate.

        Returns:
            The same ``instance``.

        Examples:
            .. code-block:: python

                class Report:
                    clock: Injected[Clock]


                report = container.build_up(Report())

        """
        owner = type(instance)
        plan = self._injection_plans.get(owner)
        if plan is None:
            plan = self._injected_members_extractor.extract(owner)
            self._injection_plans[owner] = plan
        for member in plan:
            setattr(instance, member.name, self.resolve(member.provides))
        return instance

    def _register(self, spec: ProviderSpec) -> ProviderSpec:
        with self._lock:
            previous_spec = self._providers_registrations.add(spec)
            if previous_spec is not None:
                self._singletons.pop(previous_spec.slot, None)
        logger.debug(
            "Registered %s provider for %r (lifetime=%s, replaced=%s)",
            spec.kind.name.lower(),
            spec.provides,
            spec.lifetime.value,
            previous_spec is not None,
        )
        return spec

    def _find_or_autoregister(self, dependency: Any) -> ProviderSpec:
        spec = self._providers_registrations.find_by_type(dependency)
        if spec is not None:
            return spec

        with self._lock:
            spec = self._providers_registrations.find_by_type(dependency)
            if spec is not None:
                return spec
            if is_pydantic_settings_subclass(dependency):
                return self._register(
                    ProviderSpec(
                        provides=dependency,
                        kind=ProviderKind.FACTORY,
                        factory=_build_settings_factory(dependency),
                        lifetime=Lifetime.SINGLETON,
                    ),
                )
            if self._autoregister_concrete_types and (
                self._concrete_autoregistration_policy.is_eligible_concrete(dependency)
            ):
                return self._register(
                    ProviderSpec(
                        provides=dependency,
                        kind=ProviderKind.CONCRETE_TYPE,
                        concrete_type=dependency,
                        lifetime=self._default_lifetime,
                    ),
                )

        msg = f"Dependency {dependency!r} is not registered."
        if not self._autoregister_concrete_types:
            msg += " Autoregistration is disabled; register it explicitly."
        else:
            reason = self._concrete_autoregistration_policy.ineligibility_reason(dependency)
            msg += f" It cannot be autoregistered: {reason}."
        raise PlugwireDependencyNotRegisteredError(msg)

    def _resolve_singleton(self, spec: ProviderSpec) -> Any:
        with self._lock:
            if spec.slot in self._singletons:
                return self._singletons[spec.slot]
            value = self._resolve_through_hooks(spec)
            self._singletons[spec.slot] = value
            return value

    def _resolve_through_hooks(self, spec: ProviderSpec) -> Any:
        call: Callable[[], Any] = functools.partial(self._provide, spec)
        for hook in reversed(self._resolution_hooks):
            call = functools.partial(hook, spec.provides, call)
        return call()

    def _provide(self, spec: ProviderSpec) -> Any:
        if spec.kind is ProviderKind.INSTANCE:
            return spec.instance
        if spec.kind is ProviderKind.FACTORY:
            factory = cast("FactoryProvider[Any]", spec.factory)
            plan = self._construction_plans.get(factory)
            if plan is None:
                plan = self._provider_dependencies_extractor.extract_from_factory(factory)
                self._construction_plans[factory] = plan
            return self._call_with_dependencies(factory, plan)
        return self.build_up(self.construct(cast("type[Any]", spec.concrete_type)))

    def _call_with_dependencies(
        self,
        provider: Callable[..., Any],
        dependencies: list[ProviderDependency],
    ) -> Any:
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        positional_gap = False

        for dependency in dependencies:
            is_positional_only = dependency.parameter.kind is Parameter.POSITIONAL_ONLY
            if not dependency.is_required and not self.is_registered(dependency.provides):
                positional_gap = positional_gap or is_positional_only
                continue
            if is_positional_only and positional_gap:
                continue
            value = self.resolve(dependency.provides)
            if is_positional_only:
                args.append(value)
            else:
                kwargs[dependency.parameter.name] = value

        return provider(*args, **kwargs)

    def _resolve_registration_provides(
        self,
        *,
        provides: Any,
        default: Any,
        method_name: str,
    ) -> Any:
        if provides == "infer":
            return default
        if provides is None:
            msg = f"{method_name}() parameter 'provides' must not be None; use 'infer'."
            raise PlugwireInvalidRegistrationError(msg)
        return provides

    def _resolve_registration_lifetime(
        self,
        lifetime: Lifetime | Literal["from_container"],
    ) -> Lifetime:
        if lifetime == "from_container":
            return self._default_lifetime
        if not isinstance(lifetime, Lifetime):
            msg = f"Invalid lifetime {lifetime!r}; expected a Lifetime or 'from_container'."
            raise PlugwireInvalidRegistrationError(msg)
        return lifetime

    def _infer_factory_return_type(self, factory: FactoryProvider[Any]) -> Any:
        try:
            return_annotation = get_type_hints(factory).get("return")
        except (AttributeError, NameError, TypeError) as error:
            msg = f"Unable to infer the return type of factory {factory!r}: {error}"
            raise PlugwireInvalidRegistrationError(msg) from error
        if return_annotation is None:
            msg = (
                f"Factory {factory!r} has no return annotation; "
                "pass 'provides' explicitly."
            )
            raise PlugwireInvalidRegistrationError(msg)
        return return_annotation


def _build_settings_factory(settings_type: type[Any]) -> Callable[[], Any]:
    def _build_settings() -> Any:
        return settings_type()

    return _build_settings
