"""Common error classes for troubleshooting.

Declaring a customization never fails. Problems with capabilities or with the
implementation type are reported by the ``resolve`` call that needs the
synthesized type.
"""

from __future__ import annotations

from typing import Protocol

from typing_extensions import final

from plugwire import (
    Container,
    Customizer,
    PlugwireDependencyNotRegisteredError,
    PlugwireNonExtensibleBaseError,
    PlugwireUnsupportedCapabilityError,
)


class Greeter(Protocol):
    def greet(self) -> str: ...


class HasPoints:
    points: int


class Customer:
    pass


class Account:
    pass


@final
class SealedAccount(Account):
    pass


def main() -> None:
    container = Container()
    customizer = Customizer()
    customizer.install(container)

    customizer.setup(Customer).extend_with(Greeter)
    print("declared=ok")  # => declared=ok

    try:
        container.resolve(Customer)
    except PlugwireUnsupportedCapabilityError as error:
        print(f"method_capability={type(error).__name__}")  # => method_capability=PlugwireUnsupportedCapabilityError

    container.add_concrete(SealedAccount, provides=Account)
    customizer.setup(Account).extend_with(HasPoints)
    try:
        container.resolve(Account)
    except PlugwireNonExtensibleBaseError as error:
        print(f"final_base={type(error).__name__}")  # => final_base=PlugwireNonExtensibleBaseError

    strict_container = Container(autoregister_concrete_types=False)
    try:
        strict_container.resolve(Customer)
    except PlugwireDependencyNotRegisteredError as error:
        print(f"missing={type(error).__name__}")  # => missing=PlugwireDependencyNotRegisteredError


if __name__ == "__main__":
    main()
