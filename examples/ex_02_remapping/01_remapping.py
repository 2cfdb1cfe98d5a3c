"""Customizations follow the container's current mapping.

A customization is declared for the type you resolve, not for its
implementation. Remapping ``Customer`` to ``ExtendedCustomer`` (before or
after the declaration) combines the new implementation with the declared
capability on the next resolution.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from plugwire import Container, Customizer, Injected


class Customer:
    def __init__(self) -> None:
        self.first_name = "original"


class ExtendedCustomer(Customer):
    container: Injected[Container]


@runtime_checkable
class IMixin(Protocol):
    my_property: int


def main() -> None:
    container = Container()
    customizer = Customizer()
    customizer.install(container)

    customizer.setup(Customer).extend_with(IMixin)
    container.add_concrete(ExtendedCustomer, provides=Customer)

    customer = container.resolve(Customer)
    print(f"type_name={type(customer).__name__}")  # => type_name=ExtendedCustomerWithIMixin
    print(f"is_extended={isinstance(customer, ExtendedCustomer)}")  # => is_extended=True
    print(f"is_mixin={isinstance(customer, IMixin)}")  # => is_mixin=True

    injected = getattr(customer, "container", None) is not None
    print(f"container_injected={injected}")  # => container_injected=False

    container.add_concrete(Customer)
    remapped = container.resolve(Customer)
    print(f"after_remap={type(remapped).__name__}")  # => after_remap=CustomerWithIMixin
    print(f"synthesized_types={len(customizer.synthesizer)}")  # => synthesized_types=2


if __name__ == "__main__":
    main()
