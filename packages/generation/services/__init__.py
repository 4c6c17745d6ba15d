from packages.generation.services.orchestrator import (
    GenerationOrchestrator,
    get_orchestrator,
)
from packages.generation.services.session_registry import SessionRegistry

__all__ = ["GenerationOrchestrator", "get_orchestrator", "SessionRegistry"]
