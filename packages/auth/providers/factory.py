"""Factory for singleton SSO provider instances."""

from typing import Dict, Optional
from packages.auth.providers.interface import SSOProviderInterface
from packages.auth.providers.models import SSOProvider


class SSOProviderFactory:
    _instances: Dict[SSOProvider, SSOProviderInterface] = {}

    @classmethod
    def get_provider(cls, provider: SSOProvider) -> SSOProviderInterface:
        if provider not in cls._instances:
            cls._instances[provider] = cls._create_provider(provider)

        return cls._instances[provider]

    @classmethod
    def _create_provider(cls, provider: SSOProvider) -> SSOProviderInterface:
        if provider == SSOProvider.FIREBASE:
            # Imported lazily so firebase_admin only initializes when auth is used
            from packages.auth.providers.firebase_provider import FirebaseAuthProvider

            return FirebaseAuthProvider()
        raise ValueError(f"Unsupported SSO provider: {provider}. Supported: FIREBASE.")

    @classmethod
    def clear_cache(cls, provider: Optional[SSOProvider] = None):
        if provider:
            cls._instances.pop(provider, None)
        else:
            cls._instances.clear()


def get_sso_provider(provider: SSOProvider = SSOProvider.FIREBASE) -> SSOProviderInterface:
    return SSOProviderFactory.get_provider(provider)
