from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from typing_extensions import Self

from plugwire._internal.customizations import CustomizationRegistry, CustomizationSpec
from plugwire._internal.interceptor import ResolutionInterceptor
from plugwire._internal.synthesizer import TypeSynthesizer

if TYPE_CHECKING:
    from plugwire._internal.container import Container
    from plugwire._internal.settings import PlugwireSettings

T = TypeVar("T")


class Customizer:
    """Declare extra behavior for types produced by a container.

    A customizer owns the customization registry, the type synthesizer and
    the default build-up policy. Declarations are independent of container
    registrations: ``setup`` may be called before or after the declared type
    is mapped to an implementation, and a later remap is picked up on the
    next resolution.

    Examples:
        .. code-block:: python

            container = Container()
            customizer = Customizer()
            customizer.install(container)

            customizer.setup(Customer).initialize_with(
                lambda customer: setattr(customer, "first_name", "custom"),
            ).extend_with(HasLoyaltyPoints)

            customer = container.resolve(Customer)
            assert isinstance(customer, HasLoyaltyPoints)

    """

    def __init__(
        self,
        *,
        default_build_up: bool = False,
        synthesizer: TypeSynthesizer | None = None,
    ) -> None:
        """Initialize an empty customizer.

        Args:
            default_build_up: Whether customized instances get member injection
                when their spec sets no override.
            synthesizer: Type synthesizer to share between customizers. A new
                one is created by default.

        """
        self._registry = CustomizationRegistry()
        self._synthesizer = synthesizer or TypeSynthesizer()
        self._default_build_up = default_build_up

    @classmethod
    def from_settings(cls, settings: PlugwireSettings) -> Customizer:
        """Create a customizer configured from ``PlugwireSettings``.

        Args:
            settings: Settings providing ``default_build_up``.

        """
        return cls(default_build_up=settings.default_build_up)

    def setup(self, declared_type: type[T]) -> CustomizationSpec[T]:
        """Return the customization spec of ``declared_type``, creating it on first call.

        Args:
            declared_type: Type applications resolve from the container.

        Examples:
            .. code-block:: python

                customizer.setup(Customer).extend_with(HasLoyaltyPoints).build_up(False)

        """
        return self._registry.setup(declared_type)

    def get_spec(self, declared_type: Any) -> CustomizationSpec[Any] | None:
        """Return the spec of ``declared_type``, or ``None`` when it is not customized.

        Args:
            declared_type: Dependency key being resolved.

        """
        return self._registry.get_spec(declared_type)

    def set_default_build_up(self, enabled: bool) -> Self:  # noqa: FBT001
        """Set the build-up policy used by specs without an override.

        Args:
            enabled: Whether member injection runs on customized instances.

        Returns:
            The customizer, so ``setup`` can be chained.

        """
        self._default_build_up = enabled
        return self

    def install(self, container: Container) -> ResolutionInterceptor:
        """Hook this customizer into ``container`` and make it resolvable there.

        After installation ``container.resolve(Customizer)`` returns this
        customizer.

        Args:
            container: Container whose resolutions should apply customizations.

        Returns:
            The interceptor registered as a resolution hook.

        """
        interceptor = ResolutionInterceptor(self, container)
        container.add_resolution_hook(interceptor)
        container.add_instance(self, provides=Customizer)
        return interceptor

    @property
    def default_build_up(self) -> bool:
        """The build-up policy used by specs without an override."""
        return self._default_build_up

    @property
    def registry(self) -> CustomizationRegistry:
        """The registry holding one spec per declared type."""
        return self._registry

    @property
    def synthesizer(self) -> TypeSynthesizer:
        """The cache of synthesized types."""
        return self._synthesizer
