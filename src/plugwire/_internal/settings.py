from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict

from plugwire._internal.providers import Lifetime


class PlugwireSettings(BaseSettings):
    """Environment-driven defaults for containers and customizers.

    Values are read from ``PLUGWIRE_*`` environment variables, for example
    ``PLUGWIRE_DEFAULT_BUILD_UP=true``. Pass an instance to
    ``Container.from_settings`` and ``Customizer.from_settings``.

    Examples:
        .. code-block:: python

            settings = PlugwireSettings()
            container = Container.from_settings(settings)
            customizer = Customizer.from_settings(settings)
            customizer.install(container)

    """

    model_config = SettingsConfigDict(env_prefix="PLUGWIRE_")

    default_build_up: bool = False
    """Run member injection on customized instances whose spec sets no override."""

    autoregister_concrete_types: bool = True
    """Resolve unregistered concrete classes by constructing them directly."""

    default_lifetime: Lifetime = Lifetime.TRANSIENT
    """Lifetime used by registrations that do not pass one."""
