from packages.generation.capabilities.models import (
    CapabilityPrompt,
    CapabilityContext,
)
from packages.generation.capabilities.router import (
    CapabilityHandle,
    CapabilityRouter,
    CapabilityRoute,
)

__all__ = [
    "CapabilityPrompt",
    "CapabilityContext",
    "CapabilityHandle",
    "CapabilityRouter",
    "CapabilityRoute",
]
