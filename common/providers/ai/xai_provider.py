from typing import Optional, Dict, Any

from common.core.config import settings
from .provider_enum import AIProviderType
from .aisuite_provider import AISuiteProvider
from common.providers.api_keys.factory import get_rotator
from common.providers.api_keys.provider_enum import (
    APIProviderType as KeyAPIProviderType,
)


class XAIProvider(AISuiteProvider):
    """xAI (Grok) implementation using aisuite unified interface."""

    def __init__(self, model_name: Optional[str] = None):
        super().__init__(
            provider=AIProviderType.XAI.value,
            model_name=model_name or settings.xai_model,
            rotator=get_rotator(KeyAPIProviderType.XAI),
        )

    def get_config_dict(self, rotated_key: str) -> Dict[str, Any]:
        return {"api_key": rotated_key}
