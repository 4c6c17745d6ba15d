from typing import Dict, List
from .interface import APIKeyRotationInterface
from .rotation_provider import APIKeyRotationProvider
from .provider_enum import APIProviderType
from common.core.config import settings
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)

# Health is tracked per key, so rotators outlive individual provider instances
_provider_rotators: Dict[APIProviderType, APIKeyRotationInterface] = {}


def get_rotator(provider: APIProviderType) -> APIKeyRotationInterface:
    """Get the rotator for a provider, creating it on first access."""
    if provider not in _provider_rotators:
        keys = _get_keys_for_provider(provider)
        _provider_rotators[provider] = APIKeyRotationProvider(
            keys=keys, provider_type=provider
        )
    return _provider_rotators[provider]


def _get_keys_for_provider(provider: APIProviderType) -> List[str]:
    match provider:
        case APIProviderType.OPENAI:
            return list(settings.openai_api_keys)
        case APIProviderType.XAI:
            return list(settings.xai_api_keys)
        case APIProviderType.GOOGLE:
            # Empty string means Application Default Credentials
            return [settings.google_application_credentials or ""]
        case _:
            return []


def reset_rotators() -> None:
    """Reset all rotators. Useful for testing."""
    _provider_rotators.clear()
