from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import pytest

from plugwire import (
    Container,
    Customizer,
    Injected,
    Lifetime,
    PlugwireNonExtensibleBaseError,
    PlugwireUnsupportedCapabilityError,
    synthesized_base,
)


class Customer:
    def __init__(self) -> None:
        self.first_name = "original"


class ExtendedCustomer(Customer):
    container: Injected[Container]


@runtime_checkable
class IMixin(Protocol):
    my_property: int


class Mixin:
    """Plain mixin carrying one storage-backed attribute and one concrete method."""

    my_property: int = 0

    def describe(self) -> str:
        return f"my_property={self.my_property}"


class _HasGreeting(Protocol):
    def greet(self) -> str: ...


class _Order:
    def __init__(self, customer: Customer) -> None:
        self.customer = customer


def _set_custom_name(customer: Customer) -> None:
    customer.first_name = "custom"


def _build_extended_customer() -> ExtendedCustomer:
    return ExtendedCustomer()


def test_resolving_type_without_spec_returns_exact_mapped_type(
    container: Container,
    customizer: Customizer,
) -> None:
    assert type(container.resolve(Customer)) is Customer

    container.add_concrete(ExtendedCustomer, provides=Customer)

    assert type(container.resolve(Customer)) is ExtendedCustomer


def test_initializer_only_spec_keeps_implementation_type(
    container: Container,
    customizer: Customizer,
) -> None:
    calls: list[Customer] = []
    customizer.setup(Customer).initialize_with(_set_custom_name).initialize_with(calls.append)

    first = container.resolve(Customer)
    second = container.resolve(Customer)

    assert type(first) is Customer
    assert first.first_name == "custom"
    assert calls == [first, second]


def test_initializers_run_in_registration_order(
    container: Container,
    customizer: Customizer,
) -> None:
    seen: list[str] = []
    customizer.setup(Customer).initialize_with(
        lambda customer: seen.append(customer.first_name),
    ).initialize_with(_set_custom_name).initialize_with(
        lambda customer: seen.append(customer.first_name),
    )

    container.resolve(Customer)

    assert seen == ["original", "custom"]


def test_capability_changes_runtime_type_and_keeps_initializer_mutation(
    container: Container,
    customizer: Customizer,
) -> None:
    customizer.setup(Customer).initialize_with(_set_custom_name).extend_with(IMixin)

    customer = container.resolve(Customer)

    assert type(customer) is not Customer
    assert isinstance(customer, Customer)
    assert isinstance(customer, IMixin)
    assert customer.first_name == "custom"


def test_capability_members_are_storage_backed(
    container: Container,
    customizer: Customizer,
) -> None:
    customizer.setup(Customer).extend_with(IMixin)

    customer: Any = container.resolve(Customer)
    assert customer.my_property is None

    customer.my_property = 5

    assert customer.my_property == 5
    assert vars(customer)["my_property"] == 5


def test_plain_mixin_capability_keeps_its_concrete_methods(
    container: Container,
    customizer: Customizer,
) -> None:
    customizer.setup(Customer).extend_with(Mixin)

    customer: Any = container.resolve(Customer)
    customer.my_property = 3

    assert isinstance(customer, Mixin)
    assert customer.describe() == "my_property=3"


def test_remap_registered_before_declaration_is_combined_with_capability(
    container: Container,
    customizer: Customizer,
) -> None:
    container.add_concrete(ExtendedCustomer, provides=Customer)
    customizer.setup(Customer).extend_with(IMixin)

    customer = container.resolve(Customer)

    assert type(customer) is not ExtendedCustomer
    assert isinstance(customer, ExtendedCustomer)
    assert isinstance(customer, IMixin)


def test_remap_registered_after_declaration_is_combined_with_capability(
    container: Container,
    customizer: Customizer,
) -> None:
    customizer.setup(Customer).extend_with(IMixin)
    container.add_concrete(ExtendedCustomer, provides=Customer)

    customer = container.resolve(Customer)

    assert type(customer) is not Customer
    assert isinstance(customer, ExtendedCustomer)
    assert isinstance(customer, IMixin)


def test_remap_after_first_resolution_synthesizes_against_new_base(
    container: Container,
    customizer: Customizer,
) -> None:
    customizer.setup(Customer).extend_with(IMixin)
    before = type(container.resolve(Customer))

    container.add_concrete(ExtendedCustomer, provides=Customer)
    after = type(container.resolve(Customer))

    assert before is not after
    assert synthesized_base(before) is Customer
    assert synthesized_base(after) is ExtendedCustomer
    assert len(customizer.synthesizer) == 2


def test_repeated_resolution_reuses_synthesized_type_but_not_instance(
    container: Container,
    customizer: Customizer,
) -> None:
    customizer.setup(Customer).extend_with(IMixin)

    first = container.resolve(Customer)
    second = container.resolve(Customer)

    assert type(first) is type(second)
    assert first is not second


def test_injectable_members_stay_unset_without_build_up_policy(
    container: Container,
    customizer: Customizer,
) -> None:
    container.add_concrete(ExtendedCustomer, provides=Customer)
    customizer.setup(Customer).extend_with(IMixin)

    customer = container.resolve(Customer)

    assert isinstance(customer, ExtendedCustomer)
    assert getattr(customer, "container", None) is None


def test_plain_resolution_of_uncustomized_type_runs_member_injection(
    container: Container,
    customizer: Customizer,
) -> None:
    customer = container.resolve(ExtendedCustomer)

    assert customer.container is container


def test_default_build_up_populates_injectable_members(
    container: Container,
    customizer: Customizer,
) -> None:
    container.add_concrete(ExtendedCustomer, provides=Customer)
    customizer.set_default_build_up(True).setup(Customer).extend_with(IMixin)

    customer = container.resolve(Customer)

    assert isinstance(customer, ExtendedCustomer)
    assert isinstance(customer, IMixin)
    assert customer.container is container


def test_type_override_disables_build_up_despite_default(
    container: Container,
    customizer: Customizer,
) -> None:
    container.add_concrete(ExtendedCustomer, provides=Customer)
    customizer.set_default_build_up(True).setup(Customer).build_up(False).extend_with(IMixin)

    customer = container.resolve(Customer)

    assert isinstance(customer, ExtendedCustomer)
    assert getattr(customer, "container", None) is None


def test_type_override_enables_build_up_despite_default(
    container: Container,
    customizer: Customizer,
) -> None:
    container.add_concrete(ExtendedCustomer, provides=Customer)
    customizer.set_default_build_up(False).setup(Customer).build_up(True).extend_with(IMixin)

    customer = container.resolve(Customer)

    assert isinstance(customer, ExtendedCustomer)
    assert customer.container is container


def test_initializers_run_before_member_injection(
    container: Container,
    customizer: Customizer,
) -> None:
    observed: list[object] = []
    container.add_concrete(ExtendedCustomer, provides=Customer)
    customizer.setup(Customer).build_up(True).initialize_with(
        lambda customer: observed.append(getattr(customer, "container", None)),
    )

    customer = container.resolve(Customer)

    assert observed == [None]
    assert isinstance(customer, ExtendedCustomer)
    assert customer.container is container


def test_customized_type_keeps_constructor_injection(
    container: Container,
    customizer: Customizer,
) -> None:
    customizer.setup(_Order).extend_with(IMixin)

    order = container.resolve(_Order)

    assert isinstance(order, IMixin)
    assert type(order.customer) is Customer


def test_customizations_apply_to_nested_dependencies(
    container: Container,
    customizer: Customizer,
) -> None:
    customizer.setup(Customer).initialize_with(_set_custom_name).extend_with(IMixin)

    order = container.resolve(_Order)

    assert type(order) is _Order
    assert isinstance(order.customer, IMixin)
    assert order.customer.first_name == "custom"


def test_unsupported_capability_is_reported_on_resolve_not_on_declaration(
    container: Container,
    customizer: Customizer,
) -> None:
    customizer.setup(Customer).extend_with(_HasGreeting)

    with pytest.raises(PlugwireUnsupportedCapabilityError, match="greet"):
        container.resolve(Customer)


def test_unhashable_capability_is_reported_on_resolve_not_on_declaration(
    container: Container,
    customizer: Customizer,
) -> None:
    customizer.setup(Customer).extend_with([IMixin])  # type: ignore[arg-type]

    with pytest.raises(PlugwireUnsupportedCapabilityError, match="not a class"):
        container.resolve(Customer)


def test_initializers_run_on_factory_bindings(
    container: Container,
    customizer: Customizer,
) -> None:
    calls: list[Customer] = []
    container.add_factory(Customer, provides=Customer)
    customizer.setup(Customer).initialize_with(_set_custom_name).initialize_with(calls.append)

    customer = container.resolve(Customer)

    assert type(customer) is Customer
    assert customer.first_name == "custom"
    assert calls == [customer]


def test_build_up_policy_applies_to_factory_bindings(
    container: Container,
    customizer: Customizer,
) -> None:
    container.add_factory(_build_extended_customer, provides=Customer)
    customizer.setup(Customer).build_up(True)

    customer = container.resolve(Customer)

    assert isinstance(customer, ExtendedCustomer)
    assert customer.container is container


def test_factory_bindings_without_build_up_keep_members_unset(
    container: Container,
    customizer: Customizer,
) -> None:
    container.add_factory(_build_extended_customer, provides=Customer)
    customizer.setup(Customer).initialize_with(_set_custom_name)

    customer = container.resolve(Customer)

    assert customer.first_name == "custom"
    assert getattr(customer, "container", None) is None


def test_capabilities_on_factory_bindings_are_not_extensible(
    container: Container,
    customizer: Customizer,
) -> None:
    built: list[Customer] = []

    def _build_customer() -> Customer:
        customer = Customer()
        built.append(customer)
        return customer

    container.add_factory(_build_customer)
    customizer.setup(Customer).extend_with(IMixin)

    with pytest.raises(PlugwireNonExtensibleBaseError, match="factory"):
        container.resolve(Customer)

    assert built == []


def test_initializer_errors_propagate_unwrapped(
    container: Container,
    customizer: Customizer,
) -> None:
    def _fail(_customer: Customer) -> None:
        msg = "bad customer"
        raise ValueError(msg)

    customizer.setup(Customer).initialize_with(_fail)

    with pytest.raises(ValueError, match="bad customer"):
        container.resolve(Customer)


def test_instance_bindings_are_returned_unmodified(
    container: Container,
    customizer: Customizer,
) -> None:
    existing = Customer()
    container.add_instance(existing, provides=Customer)
    customizer.setup(Customer).initialize_with(_set_custom_name).extend_with(IMixin)

    resolved = container.resolve(Customer)

    assert resolved is existing
    assert resolved.first_name == "original"


def test_singleton_customized_type_runs_pipeline_once(
    container: Container,
    customizer: Customizer,
) -> None:
    calls: list[Customer] = []
    container.add_concrete(Customer, lifetime=Lifetime.SINGLETON)
    customizer.setup(Customer).initialize_with(calls.append).extend_with(IMixin)

    first = container.resolve(Customer)
    second = container.resolve(Customer)

    assert first is second
    assert isinstance(first, IMixin)
    assert calls == [first]


def test_customizer_is_resolvable_from_its_container(
    container: Container,
    customizer: Customizer,
) -> None:
    assert container.resolve(Customizer) is customizer


def test_set_default_build_up_is_chainable() -> None:
    customizer = Customizer()

    assert customizer.set_default_build_up(True) is customizer
    assert customizer.default_build_up is True


def test_customizer_without_installation_does_not_affect_container(container: Container) -> None:
    customizer = Customizer()
    customizer.setup(Customer).extend_with(IMixin)

    assert type(container.resolve(Customer)) is Customer


def test_customizers_can_share_a_synthesizer() -> None:
    first_container = Container()
    second_container = Container()
    first = Customizer()
    second = Customizer(synthesizer=first.synthesizer)
    first.install(first_container)
    second.install(second_container)
    first.setup(Customer).extend_with(IMixin)
    second.setup(Customer).extend_with(IMixin)

    assert type(first_container.resolve(Customer)) is type(second_container.resolve(Customer))
