"""
Social network plugin registry.

Maps a plugin id to the factory that builds the network plugin. Plugins are
registered explicitly at import time; there is no discovery.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from social_auth_yelp.oauth.config import PLUGIN_ID, OAuthConfig
from social_auth_yelp.settings.models import SETTINGS_CONFIG_ID, YelpAuthSettings


logger = logging.getLogger(__name__)


class NetworkPlugin(Protocol):
    """A social network plugin able to hand out its SDK client."""

    def get_sdk(self) -> Any:
        """Return the configured SDK client, or None when not configured."""
        ...


@dataclass(frozen=True)
class NetworkDefinition:
    """Static metadata for one social network plugin."""

    id: str
    social_network: str
    type: str
    settings_config_id: str
    factory: Callable[..., NetworkPlugin]


class NetworkRegistry:
    """Registry for social network plugins."""

    def __init__(self) -> None:
        self._definitions: dict[str, NetworkDefinition] = {}

    def register(self, definition: NetworkDefinition) -> None:
        """Register a network plugin definition."""
        if definition.id in self._definitions:
            raise ValueError(f"Network plugin {definition.id} already registered")
        self._definitions[definition.id] = definition
        logger.debug(f"Registered network plugin: {definition.id}")

    def get_definition(self, plugin_id: str) -> NetworkDefinition | None:
        """Get a plugin definition by id."""
        return self._definitions.get(plugin_id)

    def list_definitions(self, type: str | None = None) -> list[NetworkDefinition]:
        """List registered definitions, optionally filtered by plugin type."""
        return [
            d for d in self._definitions.values() if type is None or d.type == type
        ]

    def create_instance(
        self,
        plugin_id: str,
        settings: YelpAuthSettings,
        config: OAuthConfig,
        base_url: str,
    ) -> NetworkPlugin:
        """
        Build a plugin instance from its factory.

        Raises:
            KeyError: If no plugin is registered under plugin_id
        """
        definition = self._definitions.get(plugin_id)
        if definition is None:
            raise KeyError(f"Unknown network plugin: {plugin_id}")
        return definition.factory(settings=settings, config=config, base_url=base_url)


def _build_registry() -> NetworkRegistry:
    from social_auth_yelp.network.yelp import YelpAuthNetwork

    registry = NetworkRegistry()
    registry.register(
        NetworkDefinition(
            id=PLUGIN_ID,
            social_network="Yelp",
            type="social_auth",
            settings_config_id=SETTINGS_CONFIG_ID,
            factory=YelpAuthNetwork,
        )
    )
    return registry


# Global registry singleton
_registry: NetworkRegistry | None = None


def get_network_registry() -> NetworkRegistry:
    """Get the network registry with the built-in plugins registered."""
    global _registry
    if _registry is None:
        _registry = _build_registry()
    return _registry
