"""pytest plugin exposing ``plugwire_container`` and ``plugwire_customizer`` fixtures.

Enable it with ``pytest_plugins = ["plugwire.integrations.pytest_plugin"]``.
"""

from plugwire._internal.integrations.pytest_plugin import (
    plugwire_container,
    plugwire_customizer,
)

__all__ = ["plugwire_container", "plugwire_customizer"]
