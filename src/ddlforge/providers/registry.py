"""
Provider Registry

Central registry for all available drivers.
Providers must register themselves here to be available in the system.
"""

import logging

from ddlforge.exceptions import UnknownDriverError

from .base.provider import Provider

logger = logging.getLogger(__name__)


class ProviderRegistryClass:
    """Registry for managing driver providers"""

    def __init__(self) -> None:
        self.providers: dict[str, Provider] = {}

    def register(self, provider: Provider) -> None:
        """
        Register a provider

        Args:
            provider: Provider to register

        Raises:
            ValueError: If provider with same ID is already registered
        """
        if provider.info.id in self.providers:
            raise ValueError(f"Provider with ID '{provider.info.id}' is already registered")

        self.providers[provider.info.id] = provider
        logger.debug("Registered provider: %s (%s)", provider.info.name, provider.info.id)

    def get(self, provider_id: str) -> Provider | None:
        """
        Get a provider by ID

        Args:
            provider_id: Driver name (e.g., 'mysql', 'sqlite')

        Returns:
            Provider instance or None
        """
        return self.providers.get(provider_id)

    def require(self, provider_id: str) -> Provider:
        """
        Get a provider by ID or fail

        Raises:
            UnknownDriverError: If no provider is registered under ``provider_id``
        """
        provider = self.get(provider_id)
        if provider is None:
            raise UnknownDriverError(provider_id, self.get_all_ids())
        return provider

    def get_all(self) -> list[Provider]:
        return list(self.providers.values())

    def get_all_ids(self) -> list[str]:
        return list(self.providers.keys())

    def has(self, provider_id: str) -> bool:
        return provider_id in self.providers

    def clear(self) -> None:
        """Clear all registered providers (useful for testing)"""
        self.providers.clear()

    def unregister(self, provider_id: str) -> None:
        if provider_id in self.providers:
            del self.providers[provider_id]


# Singleton instance
ProviderRegistry = ProviderRegistryClass()
