"""
GenerationSession - the unit of work owned by the orchestrator.

Only the pipeline task of a session mutates it. Progress never moves
backwards and nothing changes once the session is terminal.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from common.core.exceptions import ProcessingError
from packages.generation.models.domain.enums import (
    GenerationDomain,
    GenerationStep,
    SessionStatus,
)
from packages.generation.models.domain.step_result import StepResult

_ALLOWED_TRANSITIONS = {
    SessionStatus.PENDING: {SessionStatus.RUNNING, SessionStatus.FAILED},
    SessionStatus.RUNNING: {SessionStatus.COMPLETED, SessionStatus.FAILED},
    SessionStatus.COMPLETED: set(),
    SessionStatus.FAILED: set(),
}


class GenerationSessionSnapshot(BaseModel):
    """Read-only view of an active session for polling clients."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str
    domain: GenerationDomain
    status: SessionStatus
    current_step: GenerationStep
    progress: int
    started_at: datetime


class GenerationSession:
    def __init__(
        self,
        session_id: str,
        requester_id: str,
        domain: GenerationDomain,
        reservation_id: str,
        reserved_credits: int,
    ):
        if reserved_credits < 0:
            raise ValueError("reserved_credits must be non-negative")

        self.session_id = session_id
        self.requester_id = requester_id
        self.domain = domain
        self.reservation_id = reservation_id
        self.reserved_credits = reserved_credits

        self.status = SessionStatus.PENDING
        self.current_step = GenerationStep.STARTED
        self.progress_percent = 0
        self.partial_entity: Dict[str, Any] = {}
        self.step_results: List[StepResult] = []
        self.started_at = datetime.now(timezone.utc)
        self.finished_at: Optional[datetime] = None

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal()

    def _ensure_mutable(self) -> None:
        if self.is_terminal:
            raise ProcessingError(
                f"Session {self.session_id} is {self.status.value}; no further changes allowed"
            )

    def _transition(self, new_status: SessionStatus) -> None:
        self._ensure_mutable()
        if new_status not in _ALLOWED_TRANSITIONS[self.status]:
            raise ProcessingError(
                f"Invalid session transition {self.status.value} -> {new_status.value}"
            )
        self.status = new_status
        if new_status.is_terminal():
            self.finished_at = datetime.now(timezone.utc)

    def mark_running(self) -> None:
        self._transition(SessionStatus.RUNNING)

    def advance(self, step: GenerationStep, weight: int) -> int:
        """Record that ``step`` finished; progress moves forward by ``weight``."""
        self._ensure_mutable()
        if weight < 0:
            raise ValueError("Step weight must be non-negative")
        self.current_step = step
        self.progress_percent = min(100, self.progress_percent + weight)
        return self.progress_percent

    def merge(self, data: Dict[str, Any]) -> None:
        self._ensure_mutable()
        self.partial_entity.update(data)

    def record(self, result: StepResult) -> None:
        """Keep the step outcome and merge whatever data it produced."""
        self.merge(result.produced_data)
        self.step_results.append(result)

    def outcome_of(self, step: GenerationStep) -> Optional[StepResult]:
        for result in self.step_results:
            if result.step_name == step:
                return result
        return None

    def mark_completed(self) -> None:
        self._transition(SessionStatus.COMPLETED)
        self.current_step = GenerationStep.COMPLETED
        self.progress_percent = 100

    def mark_failed(self) -> None:
        # Progress is left where it was; the ERROR event reports 0 on its own
        self._transition(SessionStatus.FAILED)
        self.current_step = GenerationStep.ERROR

    def snapshot(self) -> GenerationSessionSnapshot:
        return GenerationSessionSnapshot(
            session_id=self.session_id,
            domain=self.domain,
            status=self.status,
            current_step=self.current_step,
            progress=self.progress_percent,
            started_at=self.started_at,
        )
