from enum import Enum


class APIProviderType(str, Enum):
    """API providers that use key rotation."""

    OPENAI = "openai"
    XAI = "xai"
    GOOGLE = "google"  # single service account credential path
