"""Resolution hooks and nested customizations.

``Customizer.install`` registers a resolution hook. Hooks wrap every
``resolve`` call, including the nested ones made for constructor parameters,
so a customized type is customized wherever it is injected. The first
registered hook is the outermost.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from plugwire import Container, Customizer


class HasPoints:
    points: int = 0


class Customer:
    pass


class Order:
    def __init__(self, customer: Customer) -> None:
        self.customer = customer


def main() -> None:
    seen: list[str] = []

    def trace(dependency: Any, proceed: Callable[[], Any]) -> Any:
        seen.append(getattr(dependency, "__name__", repr(dependency)))
        return proceed()

    container = Container()
    container.add_resolution_hook(trace)
    customizer = Customizer()
    customizer.install(container)

    customizer.setup(Customer).extend_with(HasPoints)
    order = container.resolve(Order)

    print(f"resolution_order={'>'.join(seen)}")  # => resolution_order=Order>Customer
    print(f"order_type={type(order).__name__}")  # => order_type=Order
    print(f"customer_type={type(order.customer).__name__}")  # => customer_type=CustomerWithHasPoints
    print(f"customizer_resolvable={container.resolve(Customizer) is customizer}")  # => customizer_resolvable=True


if __name__ == "__main__":
    main()
