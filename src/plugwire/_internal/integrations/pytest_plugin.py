from __future__ import annotations

import pytest

from plugwire._internal.container import Container
from plugwire._internal.customizer import Customizer


@pytest.fixture()
def plugwire_container() -> Container:
    """Create a per-test container used by the plugin.

    The fixture is function-scoped, so registrations are isolated between
    tests. Override it in a test suite to provide pre-configured
    registrations.

    Returns:
        A new ``Container`` instance.

    """
    return Container()


@pytest.fixture()
def plugwire_customizer(plugwire_container: Container) -> Customizer:
    """Create a per-test customizer installed on ``plugwire_container``.

    Declarations made through this customizer apply to every resolution from
    the test's container and are discarded with it.

    Returns:
        A new ``Customizer`` already installed on ``plugwire_container``.

    """
    customizer = Customizer()
    customizer.install(plugwire_container)
    return customizer


__all__ = ["plugwire_container", "plugwire_customizer"]
