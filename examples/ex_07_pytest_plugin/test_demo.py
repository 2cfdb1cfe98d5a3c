from __future__ import annotations

from typing import Protocol, runtime_checkable

import pytest

from plugwire import Container, Customizer

pytest_plugins = ["plugwire.integrations.pytest_plugin"]


class Service:
    pass


class ServiceImpl(Service):
    pass


@runtime_checkable
class Traced(Protocol):
    trace_id: str


@pytest.fixture()
def plugwire_container() -> Container:
    container = Container(autoregister_concrete_types=False)
    container.add_concrete(ServiceImpl, provides=Service)
    return container


def test_plugin_customizes_resolutions(
    plugwire_container: Container,
    plugwire_customizer: Customizer,
) -> None:
    plugwire_customizer.setup(Service).extend_with(Traced)

    service = plugwire_container.resolve(Service)

    if not isinstance(service, ServiceImpl) or not isinstance(service, Traced):
        msg = "Resolved service is not a traced ServiceImpl"
        raise TypeError(msg)
