from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from plugwire.exceptions import PlugwireNonExtensibleBaseError

if TYPE_CHECKING:
    from plugwire._internal.container import Container
    from plugwire._internal.customizations import CustomizationSpec
    from plugwire._internal.customizer import Customizer

logger = logging.getLogger(__name__)


class ResolutionInterceptor:
    """Apply customizations while the container resolves a declared type.

    Installed as a container resolution hook by ``Customizer.install``. For a
    declared type with a spec, the interceptor reads the implementation the
    container maps it to at that moment, synthesizes the combined type when
    capabilities are declared, constructs it through the container, runs the
    initializers and, depending on the build-up policy, the member-injection
    pass. Declared types without a spec are resolved unmodified.

    Factory bindings produce their value through the factory; initializers
    and the build-up policy still apply to it, but capabilities cannot be
    added since no class is constructed. Instance bindings are returned
    unmodified.
    """

    def __init__(self, customizer: Customizer, container: Container) -> None:
        self._customizer = customizer
        self._container = container

    def __call__(self, dependency: Any, proceed: Callable[[], Any]) -> Any:
        """Resolve ``dependency``, applying its customization spec when there is one.

        Args:
            dependency: Declared type requested from the container.
            proceed: Continues the container's normal resolution.

        Raises:
            PlugwireNonExtensibleBaseError: If capabilities are declared for a
                type bound to a factory.

        """
        spec = self._customizer.get_spec(dependency)
        if spec is None:
            return proceed()

        implementation = self._container.get_implementation(dependency)
        if implementation is None:
            if self._container.has_factory_binding(dependency):
                return self._customize_factory_value(dependency, spec, proceed)
            logger.debug(
                "Customization for %r skipped: its binding has no constructible implementation",
                dependency,
            )
            return proceed()

        resolved_type = implementation
        if spec.capabilities:
            resolved_type = self._customizer.synthesizer.synthesize(
                implementation,
                spec.capabilities,
            )

        return self._initialize(spec, self._container.construct(resolved_type))

    def _customize_factory_value(
        self,
        dependency: Any,
        spec: CustomizationSpec[Any],
        proceed: Callable[[], Any],
    ) -> Any:
        if spec.capabilities:
            msg = (
                f"Dependency {dependency!r} is produced by a factory; capabilities "
                "need a class binding registered with add_concrete()."
            )
            raise PlugwireNonExtensibleBaseError(msg)
        return self._initialize(spec, proceed())

    def _initialize(self, spec: CustomizationSpec[Any], instance: Any) -> Any:
        for initializer in spec.initializers:
            initializer(instance)

        if spec.effective_build_up(self._customizer.default_build_up):
            self._container.build_up(instance)
        return instance
