"""Quickstart: customize what the container builds for a type.

Install a ``Customizer`` on a container, then declare an initializer and a
capability for ``Customer``. The container keeps resolving ``Customer`` as
before, but every instance is now initialized and also implements ``IMixin``.
"""

from __future__ import annotations

from typing import Protocol, cast, runtime_checkable

from plugwire import Container, Customizer


class Customer:
    def __init__(self) -> None:
        self.first_name = "original"


@runtime_checkable
class IMixin(Protocol):
    my_property: int


def rename(customer: Customer) -> None:
    customer.first_name = "custom"


def main() -> None:
    container = Container()
    customizer = Customizer()
    customizer.install(container)

    plain = container.resolve(Customer)
    print(f"plain_type={type(plain).__name__}")  # => plain_type=Customer

    customizer.setup(Customer).initialize_with(rename).extend_with(IMixin)
    customer = container.resolve(Customer)

    print(f"first_name={customer.first_name}")  # => first_name=custom
    print(f"is_customer={isinstance(customer, Customer)}")  # => is_customer=True
    print(f"is_mixin={isinstance(customer, IMixin)}")  # => is_mixin=True
    print(f"type_name={type(customer).__name__}")  # => type_name=CustomerWithIMixin

    mixin = cast("IMixin", customer)
    mixin.my_property = 5
    print(f"my_property={mixin.my_property}")  # => my_property=5


if __name__ == "__main__":
    main()
