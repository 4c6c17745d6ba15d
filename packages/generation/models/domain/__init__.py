"""Domain models for generation."""

from packages.generation.models.domain.enums import (
    GenerationDomain,
    GenerationStep,
    SessionStatus,
    StepOutcome,
    CapabilityKind,
)
from packages.generation.models.domain.request import (
    GenerationRequest,
    ImageInput,
    Modality,
)
from packages.generation.models.domain.session import (
    GenerationSession,
    GenerationSessionSnapshot,
)
from packages.generation.models.domain.step_result import StepResult

__all__ = [
    "GenerationDomain",
    "GenerationStep",
    "SessionStatus",
    "StepOutcome",
    "CapabilityKind",
    "GenerationRequest",
    "ImageInput",
    "Modality",
    "GenerationSession",
    "GenerationSessionSnapshot",
    "StepResult",
]
