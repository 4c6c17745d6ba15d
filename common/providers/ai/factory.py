from typing import Optional
from .interface import AIProviderInterface
from .openai_provider import OpenAIProvider
from .google_provider import GoogleProvider
from .xai_provider import XAIProvider
from .provider_enum import AIProviderType


def get_ai_provider(
    provider_type: str,
    model_name: Optional[str] = None,
) -> AIProviderInterface:
    """
    Get AI provider instance.

    Args:
        provider_type: 'openai', 'google' or 'xai'
        model_name: Specific model to use. If None, uses provider default.
    """
    match provider_type.lower():
        case AIProviderType.OPENAI:
            return OpenAIProvider(model_name=model_name)
        case AIProviderType.GOOGLE:
            return GoogleProvider(model_name=model_name)
        case AIProviderType.XAI:
            return XAIProvider(model_name=model_name)
        case _:
            raise ValueError(f"Unknown AI provider type: {provider_type}")
