from typing import Optional, Dict, Any

from common.core.config import settings
from .provider_enum import AIProviderType
from .aisuite_provider import AISuiteProvider
from common.providers.api_keys.factory import get_rotator
from common.providers.api_keys.provider_enum import (
    APIProviderType as KeyAPIProviderType,
)


class GoogleProvider(AISuiteProvider):
    """Google Gemini on Vertex AI through aisuite."""

    def __init__(self, model_name: Optional[str] = None):
        model = model_name or settings.google_model

        self.google_project_id = settings.google_project_id
        self.google_region = settings.google_region
        self.google_credentials_path = settings.google_application_credentials

        super().__init__(
            provider=AIProviderType.GOOGLE.value,
            model_name=model,
            rotator=get_rotator(KeyAPIProviderType.GOOGLE),
        )

    def get_config_dict(self, rotated_key: str) -> Dict[str, Any]:
        return {
            "project_id": self.google_project_id,
            "region": self.google_region,
            # aisuite insists on a value; vertexai.init() falls back to ADC
            "application_credentials": self.google_credentials_path
            or "workload-identity",
        }
