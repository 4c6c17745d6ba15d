from .interface import AIProviderInterface
from .factory import get_ai_provider
from .provider_enum import AIProviderType
from .models import InputMessage, Message

__all__ = [
    "AIProviderInterface",
    "get_ai_provider",
    "AIProviderType",
    "InputMessage",
    "Message",
]
