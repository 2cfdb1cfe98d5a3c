"""Kinds of capabilities.

A capability can be a protocol, an ABC or a plain mixin. Annotated attributes
and abstract properties become per-instance storage on the synthesized type;
concrete mixin methods are inherited as they are. Adding the same capability
twice is a no-op, and the synthesized type is reused across resolutions.
"""

from __future__ import annotations

import abc
from typing import cast

from plugwire import Container, Customizer


class Order:
    def __init__(self) -> None:
        self.total = 100


class HasDiscount:
    discount: int = 0

    def describe_discount(self) -> str:
        return f"{self.discount}%"


class Tagged(abc.ABC):
    @property
    @abc.abstractmethod
    def tag(self) -> str: ...


def main() -> None:
    container = Container()
    customizer = Customizer()
    customizer.install(container)

    customizer.setup(Order).extend_with(HasDiscount).extend_with(Tagged).extend_with(HasDiscount)
    order = container.resolve(Order)
    print(f"type_name={type(order).__name__}")  # => type_name=OrderWithHasDiscountTagged

    discounted = cast("HasDiscount", order)
    print(f"default_discount={discounted.discount}")  # => default_discount=0
    discounted.discount = 15
    print(f"discount={discounted.describe_discount()}")  # => discount=15%

    tagged = cast("Tagged", order)
    print(f"tag_before={tagged.tag}")  # => tag_before=None
    setattr(order, "tag", "gold")  # noqa: B010
    print(f"tag_after={tagged.tag}")  # => tag_after=gold

    print(f"storage={sorted(vars(order))}")  # => storage=['discount', 'tag', 'total']
    print(f"same_type={type(container.resolve(Order)) is type(order)}")  # => same_type=True


if __name__ == "__main__":
    main()
