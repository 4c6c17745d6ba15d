from abc import ABC, abstractmethod

from packages.auth.providers.models import SSOProvider


class SSOProviderInterface(ABC):
    """Interface for SSO providers"""

    @abstractmethod
    def get_provider_name(self) -> SSOProvider:
        """Get the provider name"""
        pass

    @abstractmethod
    async def get_provider_user_id_from_token(self, token: str) -> str:
        """Verify the token and return the provider's user id (the requester id)"""
        pass
