"""
Provider registry: a closed, read-only table of OAuth adapters.

Built once at startup from configuration. Lookups resolve a provider name
or enum member to its adapter; anything not in the table, including
'local', is rejected as invalid input.
"""

from collections.abc import Mapping
from types import MappingProxyType

from auth.exceptions import InvalidInputError
from auth.types import Provider
from oauth.base import OAuthProvider


class ProviderRegistry:
    """Immutable mapping of Provider to OAuthProvider adapter."""

    def __init__(self, providers: Mapping[Provider, OAuthProvider]):
        for key, adapter in providers.items():
            if key is Provider.LOCAL:
                raise ValueError("The local provider has no OAuth adapter")
            if adapter.provider is not key:
                raise ValueError(f"Adapter for {adapter.provider.value} registered under {key.value}")
        self._providers: Mapping[Provider, OAuthProvider] = MappingProxyType(dict(providers))

    @staticmethod
    def resolve(provider: Provider | str) -> Provider:
        """
        Normalize a provider name to the enum.

        Raises:
            InvalidInputError: If the name is not a known OAuth provider.
        """
        if isinstance(provider, Provider):
            resolved = provider
        else:
            try:
                resolved = Provider(str(provider).lower())
            except ValueError:
                raise InvalidInputError(
                    f"Unsupported provider: {provider}",
                    public_message="Unsupported provider",
                ) from None
        if resolved is Provider.LOCAL:
            raise InvalidInputError("Local provider is not an OAuth provider", public_message="Unsupported provider")
        return resolved

    def get(self, provider: Provider | str) -> OAuthProvider:
        """
        Look up the adapter for a provider.

        Raises:
            InvalidInputError: If the provider is unknown or not configured.
        """
        key = self.resolve(provider)
        adapter = self._providers.get(key)
        if adapter is None:
            raise InvalidInputError(
                f"Provider not configured: {key.value}",
                public_message="Unsupported provider",
            )
        return adapter

    def __contains__(self, provider: object) -> bool:
        if not isinstance(provider, (Provider, str)):
            return False
        try:
            key = self.resolve(provider)
        except InvalidInputError:
            return False
        return key in self._providers

    @property
    def providers(self) -> tuple[Provider, ...]:
        return tuple(self._providers)
