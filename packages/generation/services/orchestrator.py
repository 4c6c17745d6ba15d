"""
GenerationOrchestrator - runs generation sessions end to end.

``start`` validates, prices and reserves synchronously, then hands the
pipeline to a background task and returns the session id. The pipeline
runs the domain's step catalog in order, persists the compiled entity,
queues its asset job and settles the reservation: committed on success,
released on failure. Every session ends with exactly one terminal event.
"""

import asyncio
from typing import Dict, Optional, Tuple

from common.core.config import settings
from common.core.exceptions import (
    EnqueueError,
    PersistenceError,
    ProcessingError,
    ValidationError,
)
from common.core.otel_axiom_exporter import trace_span, get_logger
from common.core.security import generate_session_id, validate_image_content_type
from common.providers.storage.factory import get_storage
from common.providers.storage.interface import StorageInterface
from common.repositories.entity import EntityRepositoryInterface
from packages.assets.services.asset_queue_service import AssetQueueService
from packages.characters.repositories.character_repository import CharacterRepository
from packages.credits.services.ledger_service import CreditLedgerService
from packages.credits.services.pricing import cost
from packages.generation.capabilities.router import CapabilityRouter
from packages.generation.models.domain.enums import (
    GenerationDomain,
    GenerationStep,
    StepOutcome,
)
from packages.generation.models.domain.progress import (
    AssetQueuedData,
    CompletedData,
    ErrorData,
    PersistedData,
    ProgressData,
    ProgressEvent,
    StartedData,
    StepSkippedData,
)
from packages.generation.models.domain.request import GenerationRequest
from packages.generation.models.domain.session import (
    GenerationSession,
    GenerationSessionSnapshot,
)
from packages.generation.progress.factory import get_progress_channel
from packages.generation.progress.interface import ProgressChannelInterface
from packages.generation.progress.topics import build_topic
from packages.generation.services.session_registry import SessionRegistry
from packages.generation.steps.base import StepContext
from packages.generation.steps.catalog import StepCatalog, get_catalog
from packages.generation.steps.executor import execute_step
from packages.stories.repositories.story_repository import StoryRepository

logger = get_logger(__name__)


class StepFailedError(ProcessingError):
    """A step ended FATAL; carries the step and its error detail."""

    def __init__(self, step: GenerationStep, detail: str):
        self.step = step
        self.detail = detail
        super().__init__(f"{step.value} failed: {detail}")


def _describe(error: Exception) -> str:
    return f"{type(error).__name__}: {error}"


class GenerationOrchestrator:
    def __init__(
        self,
        ledger: Optional[CreditLedgerService] = None,
        router: Optional[CapabilityRouter] = None,
        channel: Optional[ProgressChannelInterface] = None,
        repositories: Optional[Dict[GenerationDomain, EntityRepositoryInterface]] = None,
        asset_queue: Optional[AssetQueueService] = None,
        storage: Optional[StorageInterface] = None,
        catalogs: Optional[Dict[GenerationDomain, StepCatalog]] = None,
    ):
        self.ledger = ledger or CreditLedgerService()
        self.router = router or CapabilityRouter()
        self.channel = channel or get_progress_channel()
        self.repositories = repositories or {
            GenerationDomain.CHARACTER: CharacterRepository(),
            GenerationDomain.STORY: StoryRepository(),
        }
        self.asset_queue = asset_queue or AssetQueueService()
        self.storage = storage or get_storage()
        self.catalogs = catalogs or {domain: get_catalog(domain) for domain in GenerationDomain}
        self.registry = SessionRegistry()
        # Strong references; the event loop only keeps weak ones
        self._tasks: Dict[str, asyncio.Task] = {}

    # Intake

    def validate(self, request: GenerationRequest) -> None:
        """
        Synchronous input checks.

        Raises:
            ValidationError: no usable input, text too long, or a bad image
        """
        modality = request.modality
        if not modality.has_text and not modality.has_image:
            raise ValidationError("A description or an image is required")

        text = request.normalized_text
        if text is not None and len(text) > settings.generation_text_max_length:
            raise ValidationError(
                f"Description exceeds {settings.generation_text_max_length} characters"
            )

        if request.image is not None:
            if request.image.size == 0:
                raise ValidationError("Uploaded image is empty")
            if request.image.size > settings.generation_image_max_bytes:
                raise ValidationError(
                    f"Image exceeds {settings.generation_image_max_bytes} bytes"
                )
            if not validate_image_content_type(request.image.content_type):
                raise ValidationError(
                    f"Unsupported image type: {request.image.content_type}"
                )

    @trace_span
    async def start(self, request: GenerationRequest) -> str:
        """
        Accept a request and start its pipeline in the background.

        Returns:
            The new session id

        Raises:
            ValidationError: invalid input; nothing was reserved
            InsufficientCreditsError: balance too low; nothing was reserved
            CreditLedgerBusyError: the ledger lock timed out
        """
        self.validate(request)
        catalog = self.catalogs[request.domain]

        amount = cost(request.modality)
        session_id = generate_session_id()
        reservation = await self.ledger.reserve(request.requester_id, amount, session_id)

        session = GenerationSession(
            session_id=session_id,
            requester_id=request.requester_id,
            domain=request.domain,
            reservation_id=reservation.id,
            reserved_credits=amount,
        )
        self.registry.register(session)

        task = asyncio.create_task(
            self._run(session, request, catalog), name=f"generation:{session_id}"
        )
        self._tasks[session_id] = task
        task.add_done_callback(lambda _: self._tasks.pop(session_id, None))

        logger.info(
            f"Started {request.domain.value} generation {session_id} for user {request.requester_id} ({amount} credits)",
            extra={"session_id": session_id, "user_id": request.requester_id},
        )
        return session_id

    # Queries

    def get_session_status(
        self, session_id: str, requester_id: str
    ) -> Optional[GenerationSessionSnapshot]:
        session = self.registry.get(session_id)
        if session is None or session.requester_id != requester_id:
            return None
        return session.snapshot()

    async def wait(self, session_id: str) -> None:
        """Wait for a session's pipeline to finish. Returns at once if it already has."""
        task = self._tasks.get(session_id)
        if task is not None:
            await task

    async def shutdown(self) -> None:
        """Let in-flight pipelines reach their terminal state."""
        pending = list(self._tasks.values())
        if not pending:
            return
        logger.info(f"Waiting for {len(pending)} generation sessions to finish")
        await asyncio.gather(*pending, return_exceptions=True)

    # Pipeline

    async def _emit(
        self,
        topic: str,
        session: GenerationSession,
        step: GenerationStep,
        progress: int,
        message: str,
        data: Optional[ProgressData] = None,
    ) -> None:
        event = ProgressEvent(
            session_id=session.session_id,
            step=step,
            progress=progress,
            message=message,
            data=data,
        )
        try:
            published = await self.channel.publish(topic, event)
        except Exception as e:
            logger.error(f"Progress publish raised for session {session.session_id}: {e}")
            return
        if not published:
            logger.warning(
                f"Progress event {step.value} not delivered for session {session.session_id}"
            )

    async def _run(
        self, session: GenerationSession, request: GenerationRequest, catalog: StepCatalog
    ) -> None:
        topic = build_topic(session.domain, session.requester_id, session.session_id)
        step = GenerationStep.STARTED

        try:
            session.mark_running()
            await self._emit(
                topic,
                session,
                GenerationStep.STARTED,
                0,
                "Generation started",
                StartedData(
                    domain=session.domain,
                    has_text=request.modality.has_text,
                    has_image=request.modality.has_image,
                    reserved_credits=session.reserved_credits,
                ),
            )

            for definition in catalog:
                step = definition.step
                context = StepContext.build(
                    request,
                    session.session_id,
                    session.partial_entity,
                    self.router,
                    self.storage,
                )
                result = await execute_step(definition, context)
                session.record(result)
                if result.is_fatal:
                    raise StepFailedError(step, result.error_detail)

                progress = session.advance(step, definition.weight)
                if result.outcome == StepOutcome.SKIPPED_FALLBACK:
                    data = StepSkippedData(reason=result.error_detail)
                else:
                    data = definition.build_event_data(result.produced_data)
                await self._emit(topic, session, step, progress, definition.message, data)

            step = GenerationStep.PERSISTING
            entity_id = await self._persist(session)
            progress = session.advance(step, catalog.persisting_weight)
            await self._emit(
                topic,
                session,
                step,
                progress,
                f"Saved {session.domain.value}",
                PersistedData(entity_id=entity_id),
            )

            step = GenerationStep.QUEUING_ASSET
            job_id, enqueue_failed = await self._queue_asset(session, catalog, entity_id)
            progress = session.advance(step, catalog.queuing_weight)
            await self._emit(
                topic,
                session,
                step,
                progress,
                "Asset generation queued" if not enqueue_failed else "Asset generation unavailable",
                AssetQueuedData(job_id=job_id, enqueue_failed=enqueue_failed),
            )

            completed = CompletedData(
                entity_id=entity_id,
                domain=session.domain,
                summary=session.partial_entity["draft"].summary(),
                asset_job_id=job_id,
                asset_enqueue_failed=enqueue_failed,
            )
            await self._commit(session)
            session.mark_completed()
            await self._emit(
                topic,
                session,
                GenerationStep.COMPLETED,
                100,
                f"{session.domain.value.capitalize()} generation completed",
                completed,
            )
            logger.info(
                f"Generation {session.session_id} completed: {session.domain.value} {entity_id}",
                extra={"session_id": session.session_id, "entity_id": entity_id},
            )
        except asyncio.CancelledError:
            if not session.is_terminal:
                await self._fail(topic, session, step, "Generation cancelled")
            raise
        except Exception as e:
            detail = e.detail if isinstance(e, StepFailedError) else _describe(e)
            await self._fail(topic, session, step, detail)
        finally:
            self.registry.remove(session.session_id)

    async def _persist(self, session: GenerationSession) -> int:
        draft = session.partial_entity.get("draft")
        if draft is None:
            raise PersistenceError("No compiled entity to persist")

        repository = self.repositories[session.domain]
        try:
            return await repository.create_from_draft(draft)
        except Exception as e:
            raise PersistenceError(f"Failed to save {session.domain.value}: {e}") from e

    async def _queue_asset(
        self, session: GenerationSession, catalog: StepCatalog, entity_id: int
    ) -> Tuple[Optional[str], bool]:
        job = catalog.build_asset_job(session.partial_entity, entity_id, session.session_id)
        try:
            return await self.asset_queue.enqueue(job), False
        except EnqueueError as e:
            logger.warning(
                f"Asset job for session {session.session_id} not queued: {e}",
                extra={"session_id": session.session_id, "entity_id": entity_id},
            )
            return None, True

    async def _commit(self, session: GenerationSession) -> None:
        try:
            await self.ledger.commit(session.reservation_id)
        except Exception as e:
            # The entity exists; the reconciliation sweep settles the reservation
            logger.error(
                f"Commit of reservation {session.reservation_id} failed for session {session.session_id}: {e}",
                extra={"session_id": session.session_id},
            )

    async def _fail(
        self, topic: str, session: GenerationSession, step: GenerationStep, detail: str
    ) -> None:
        logger.warning(
            f"Generation {session.session_id} failed at {step.value}: {detail}",
            extra={"session_id": session.session_id, "failed_step": step.value},
        )
        if not session.is_terminal:
            session.mark_failed()

        try:
            await self.ledger.release(session.reservation_id, reason=f"{step.value}: {detail}")
        except Exception as e:
            logger.error(
                f"Release of reservation {session.reservation_id} failed; left for the sweep: {e}",
                extra={"session_id": session.session_id},
            )

        await self._emit(
            topic,
            session,
            GenerationStep.ERROR,
            0,
            "Generation failed",
            ErrorData(failed_step=step, error_detail=detail),
        )


# Global instance
_orchestrator: Optional[GenerationOrchestrator] = None


def get_orchestrator() -> GenerationOrchestrator:
    global _orchestrator

    if _orchestrator is None:
        _orchestrator = GenerationOrchestrator()
    return _orchestrator


async def shutdown_orchestrator() -> None:
    """Drain the process-wide orchestrator, if one was ever created."""
    if _orchestrator is not None:
        await _orchestrator.shutdown()
