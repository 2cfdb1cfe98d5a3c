"""Shared pytest fixtures for plugwire tests."""

import pytest

from plugwire import Container, Customizer


@pytest.fixture()
def container() -> Container:
    """Default container with autoregistration enabled."""
    return Container()


@pytest.fixture()
def container_no_autoregister() -> Container:
    """Container in strict mode."""
    return Container(autoregister_concrete_types=False)


@pytest.fixture()
def customizer(container: Container) -> Customizer:
    """Customizer installed on the default container."""
    customizer = Customizer()
    customizer.install(container)
    return customizer
