"""Registry of named plugin factories.

Registries are plain objects owned by whoever drives the agent. They are
filled explicitly at startup, never as a side effect of importing a module.
"""

from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar

from metricshipper.core.errors import ConfigurationError

P = TypeVar("P")

PluginFactory = Callable[..., P]


class PluginRegistry(Generic[P]):
    """Maps a plugin kind (e.g., "cloudwatch") to a factory.

    Factories are called with the plugin's configuration options as keyword
    arguments.
    """

    def __init__(self) -> None:
        self._factories: dict[str, PluginFactory[P]] = {}

    def register(self, kind: str, factory: PluginFactory[P]) -> None:
        """Register a factory for a plugin kind.

        Raises:
            TypeError: If factory is not callable.
            ValueError: If the kind is already registered.
        """
        if not callable(factory):
            raise TypeError("factory must be callable")
        if kind in self._factories:
            raise ValueError(f"plugin kind {kind!r} already registered")
        self._factories[kind] = factory

    def lookup(self, kind: str) -> PluginFactory[P] | None:
        """Return the factory for a kind, or None if unregistered."""
        return self._factories.get(kind)

    def kinds(self) -> list[str]:
        """Registered kinds in registration order."""
        return list(self._factories)

    def create(self, kind: str, options: Mapping[str, Any] | None = None) -> P:
        """Build a plugin instance from its kind and options.

        Raises:
            ConfigurationError: If the kind is unknown or the options are
                rejected by the factory.
        """
        factory = self.lookup(kind)
        if factory is None:
            known = ", ".join(self.kinds()) or "none"
            raise ConfigurationError(f"unknown plugin kind {kind!r} (known: {known})")
        try:
            return factory(**dict(options or {}))
        except TypeError as e:
            raise ConfigurationError(f"invalid options for {kind!r}: {e}") from e

    def __contains__(self, kind: object) -> bool:
        return kind in self._factories

    def __len__(self) -> int:
        return len(self._factories)
