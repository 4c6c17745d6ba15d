from .rotation_provider import APIKeyRotationProvider
from .provider_enum import APIProviderType
from .interface import APIKeyRotationInterface
from .factory import get_rotator, reset_rotators

__all__ = [
    "APIKeyRotationProvider",
    "APIKeyRotationInterface",
    "get_rotator",
    "reset_rotators",
    "APIProviderType",
]
