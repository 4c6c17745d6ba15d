"""
Step building blocks.

A step reads a StepContext and returns new fields for the partial entity;
it never touches the session or the progress channel. OPTIONAL steps carry
a fallback that produces deterministic default data when ``run`` fails.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

from common.providers.storage.interface import StorageInterface
from packages.generation.capabilities.router import CapabilityRouter
from packages.generation.models.domain.enums import CapabilityKind, GenerationStep
from packages.generation.models.domain.progress import ProgressData
from packages.generation.models.domain.request import GenerationRequest


@dataclass(frozen=True)
class StepContext:
    request: GenerationRequest
    session_id: str
    partial_entity: Mapping[str, Any]
    router: CapabilityRouter
    storage: Optional[StorageInterface] = None

    @classmethod
    def build(
        cls,
        request: GenerationRequest,
        session_id: str,
        partial_entity: Dict[str, Any],
        router: CapabilityRouter,
        storage: Optional[StorageInterface] = None,
    ) -> "StepContext":
        return cls(
            request=request,
            session_id=session_id,
            partial_entity=MappingProxyType(dict(partial_entity)),
            router=router,
            storage=storage,
        )

    @property
    def text(self) -> Optional[str]:
        return self.request.normalized_text

    @property
    def has_image(self) -> bool:
        return self.request.image is not None

    def capability(self, kind: CapabilityKind):
        return self.router.select(kind, self.request.sensitive)

    def get(self, key: str, default: Any = None) -> Any:
        return self.partial_entity.get(key, default)


StepRun = Callable[[StepContext], Awaitable[Dict[str, Any]]]
StepFallback = Callable[[StepContext, Exception], Dict[str, Any]]
EventDataBuilder = Callable[[Dict[str, Any]], Optional[ProgressData]]


@dataclass(frozen=True)
class StepDefinition:
    step: GenerationStep
    weight: int
    required: bool
    run: StepRun
    message: str
    fallback: Optional[StepFallback] = None
    event_data: Optional[EventDataBuilder] = None

    def __post_init__(self):
        if self.weight < 0:
            raise ValueError(f"{self.step.value}: weight must be non-negative")
        if not self.required and self.fallback is None:
            raise ValueError(f"{self.step.value}: OPTIONAL steps need a fallback")

    def build_event_data(self, produced: Dict[str, Any]) -> Optional[ProgressData]:
        if self.event_data is None or not produced:
            return None
        return self.event_data(produced)
