"""OAuth provider adapters."""

from oauth.base import OAuthProvider, OAuthProviderError
from oauth.registry import ProviderRegistry
