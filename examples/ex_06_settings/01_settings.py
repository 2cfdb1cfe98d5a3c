"""Environment-driven configuration.

``PlugwireSettings`` reads ``PLUGWIRE_*`` environment variables. Build the
container and the customizer from it to pick up the defaults. Application
``BaseSettings`` subclasses are autoregistered as singletons.
"""

from __future__ import annotations

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from plugwire import Container, Customizer, Injected, PlugwireSettings


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="APP_")

    greeting: str = "hello"


class Audited:
    audited_by: str


class Report:
    settings: Injected[AppSettings]


def main() -> None:
    os.environ["PLUGWIRE_DEFAULT_BUILD_UP"] = "true"
    os.environ["PLUGWIRE_DEFAULT_LIFETIME"] = "transient"

    settings = PlugwireSettings()
    container = Container.from_settings(settings)
    customizer = Customizer.from_settings(settings)
    customizer.install(container)

    print(f"default_build_up={customizer.default_build_up}")  # => default_build_up=True
    print(f"default_lifetime={settings.default_lifetime.value}")  # => default_lifetime=transient

    customizer.setup(Report).extend_with(Audited)
    report = container.resolve(Report)
    print(f"greeting={report.settings.greeting}")  # => greeting=hello

    same_settings = container.resolve(AppSettings) is report.settings
    print(f"settings_singleton={same_settings}")  # => settings_singleton=True


if __name__ == "__main__":
    main()
