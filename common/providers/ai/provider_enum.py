from enum import Enum


class AIProviderType(str, Enum):
    """Enumeration of supported AI provider types."""

    OPENAI = "openai"
    GOOGLE = "google"
    XAI = "xai"
