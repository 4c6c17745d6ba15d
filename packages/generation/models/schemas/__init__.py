from packages.generation.models.schemas.generation import (
    GenerationAcceptedResponse,
    InsufficientCreditsResponse,
)

__all__ = ["GenerationAcceptedResponse", "InsufficientCreditsResponse"]
