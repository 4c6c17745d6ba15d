from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, model_validator

from packages.generation.models.domain.enums import GenerationStep, StepOutcome


class StepResult(BaseModel):
    """Output of one pipeline step. ``error_detail`` is set iff outcome is not OK."""

    step_name: GenerationStep
    outcome: StepOutcome
    produced_data: Dict[str, Any] = Field(default_factory=dict)
    error_detail: Optional[str] = None

    @model_validator(mode="after")
    def _detail_matches_outcome(self) -> "StepResult":
        if self.outcome == StepOutcome.OK and self.error_detail is not None:
            raise ValueError("error_detail must be empty for OK outcomes")
        if self.outcome != StepOutcome.OK and not self.error_detail:
            raise ValueError("error_detail is required for non-OK outcomes")
        return self

    @property
    def is_fatal(self) -> bool:
        return self.outcome == StepOutcome.FATAL
