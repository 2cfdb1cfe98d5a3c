"""Tests for custom exception hierarchy."""

from __future__ import annotations

from typing import Protocol

import pytest

from plugwire import (
    Container,
    Customizer,
    PlugwireCircularDependencyError,
    PlugwireDependencyInferenceError,
    PlugwireDependencyNotRegisteredError,
    PlugwireError,
    PlugwireInvalidRegistrationError,
    PlugwireNonExtensibleBaseError,
    PlugwireUnsupportedCapabilityError,
)


class _Greeter(Protocol):
    def greet(self) -> str: ...


class _Customer:
    pass


class _HasPoints:
    points: int


class _HasPointsToo:
    points: int


class TestPlugwireErrorHierarchy:
    @pytest.mark.parametrize(
        "error_type",
        [
            PlugwireCircularDependencyError,
            PlugwireDependencyInferenceError,
            PlugwireDependencyNotRegisteredError,
            PlugwireInvalidRegistrationError,
            PlugwireNonExtensibleBaseError,
            PlugwireUnsupportedCapabilityError,
        ],
    )
    def test_every_error_derives_from_plugwire_error(self, error_type: type[Exception]) -> None:
        assert issubclass(error_type, PlugwireError)

    def test_errors_can_be_caught_by_base_class(self) -> None:
        container = Container(autoregister_concrete_types=False)

        with pytest.raises(PlugwireError):
            container.resolve(_Customer)


class TestPlugwireUnsupportedCapabilityError:
    def test_declaring_unsupported_capability_does_not_raise(
        self,
        customizer: Customizer,
    ) -> None:
        spec = customizer.setup(_Customer).extend_with(_Greeter)

        assert len(spec.capabilities) == 1

    def test_raised_from_resolve_for_method_capability(
        self,
        container: Container,
        customizer: Customizer,
    ) -> None:
        customizer.setup(_Customer).extend_with(_Greeter)

        with pytest.raises(PlugwireUnsupportedCapabilityError) as exc_info:
            container.resolve(_Customer)

        assert "greet" in str(exc_info.value)
        assert "_Customer" in str(exc_info.value)

    def test_raised_for_conflicting_capabilities(
        self,
        container: Container,
        customizer: Customizer,
    ) -> None:
        customizer.setup(_Customer).extend_with(_HasPoints).extend_with(_HasPointsToo)

        with pytest.raises(PlugwireUnsupportedCapabilityError, match="conflicts"):
            container.resolve(_Customer)

    def test_raised_for_non_class_capability(
        self,
        container: Container,
        customizer: Customizer,
    ) -> None:
        customizer.setup(_Customer).extend_with("HasPoints")  # type: ignore[arg-type]

        with pytest.raises(PlugwireUnsupportedCapabilityError, match="not a class"):
            container.resolve(_Customer)

    def test_failed_synthesis_is_retried_on_next_resolution(
        self,
        container: Container,
        customizer: Customizer,
    ) -> None:
        customizer.setup(_Customer).extend_with(_Greeter)

        for _ in range(2):
            with pytest.raises(PlugwireUnsupportedCapabilityError):
                container.resolve(_Customer)

        assert len(customizer.synthesizer) == 0


class TestPlugwireNonExtensibleBaseError:
    def test_raised_when_implementation_refuses_subclassing(
        self,
        container: Container,
        customizer: Customizer,
    ) -> None:
        container.add_concrete(bool, provides=int)
        customizer.setup(int).extend_with(_HasPoints)

        with pytest.raises(PlugwireNonExtensibleBaseError) as exc_info:
            container.resolve(int)

        assert "bool" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, TypeError)
