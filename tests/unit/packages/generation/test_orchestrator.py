"""
Generation pipeline end to end: real ledger and repositories on the test
database, in-memory progress channel, scripted AI replies.
"""

import asyncio
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from common.core.exceptions import InsufficientCreditsError, ValidationError
from packages.assets.services.asset_queue_service import AssetQueueService
from packages.characters.repositories.character_repository import CharacterRepository
from packages.credits.models.domain.enums import ReservationState
from packages.generation.models.domain.enums import (
    GenerationDomain,
    GenerationStep,
    SessionStatus,
)
from packages.generation.models.domain.progress import (
    CompletedData,
    ErrorData,
    StartedData,
    StepSkippedData,
)
from packages.generation.models.domain.request import GenerationRequest, ImageInput
from packages.generation.progress.memory import InMemoryProgressChannel
from packages.generation.progress.topics import build_topic
from packages.generation.services.orchestrator import GenerationOrchestrator
from packages.stories.repositories.story_repository import StoryRepository
from tests.fixtures import (
    CHARACTER_IMAGE_ANALYSIS,
    STORY_IMAGE_ANALYSIS,
    STORY_OBJECTIVES,
    STORY_SCENE,
    STORY_TAGS,
    png_bytes,
    scripted_router,
)

USER = "u1"


@pytest.fixture
def channel():
    return InMemoryProgressChannel()


@pytest.fixture
def build(ledger, channel, mock_storage, mock_message_queue):
    """Orchestrator factory; returns ``(orchestrator, capability_calls)``."""

    def _build(overrides=None, repositories=None, progress_channel=None):
        router, calls = scripted_router(overrides)
        orchestrator = GenerationOrchestrator(
            ledger=ledger,
            router=router,
            channel=progress_channel or channel,
            repositories=repositories
            or {
                GenerationDomain.CHARACTER: CharacterRepository(),
                GenerationDomain.STORY: StoryRepository(),
            },
            asset_queue=AssetQueueService(message_queue=mock_message_queue),
            storage=mock_storage,
        )
        return orchestrator, calls

    return _build


@pytest.fixture
async def funded(ledger):
    await ledger.grant(USER, 200)


def text_request(domain=GenerationDomain.STORY, text="A heist aboard a sky archive", **kwargs):
    return GenerationRequest(requester_id=USER, domain=domain, text=text, **kwargs)


def image_request(domain=GenerationDomain.STORY, text=None):
    return GenerationRequest(
        requester_id=USER,
        domain=domain,
        text=text,
        image=ImageInput(content=png_bytes(), content_type="image/png", filename="scene.png"),
    )


async def run(orchestrator, channel, request):
    """Start a session, follow its topic and return ``(session_id, events)``."""
    session_id = await orchestrator.start(request)
    subscription = await channel.join(
        build_topic(request.domain, request.requester_id, session_id)
    )
    await orchestrator.wait(session_id)
    events = [e async for e in subscription]
    return session_id, events


async def reservation_for(ledger):
    transactions, _ = await ledger.get_transactions(USER)
    reservation_id = next(t.reservation_id for t in transactions if t.reservation_id)
    return await ledger.get_reservation(reservation_id)


def assert_well_formed(events):
    assert events[0].step == GenerationStep.STARTED
    assert events[0].progress == 0
    terminal = [e for e in events if e.is_terminal]
    assert terminal == [events[-1]]
    progress = [e.progress for e in events if e.step != GenerationStep.ERROR]
    assert progress == sorted(progress)


@pytest.mark.usefixtures("funded")
class TestSuccessfulGeneration:
    """Pipelines that reach COMPLETED and commit their reservation."""

    async def test_text_only_character(self, build, channel, ledger, mock_message_queue):
        """Test the full character step sequence, progress values and charge for text input."""
        orchestrator, calls = build()

        _, events = await run(orchestrator, channel, text_request(GenerationDomain.CHARACTER))

        assert_well_formed(events)
        assert [e.step for e in events] == [
            GenerationStep.STARTED,
            GenerationStep.UPLOADING_IMAGE,
            GenerationStep.ANALYZING_IMAGE,
            GenerationStep.EXTRACTING_DESCRIPTION,
            GenerationStep.GENERATING_ATTRIBUTES,
            GenerationStep.GENERATING_NARRATIVE,
            GenerationStep.COMPILING_ENTITY,
            GenerationStep.PERSISTING,
            GenerationStep.QUEUING_ASSET,
            GenerationStep.COMPLETED,
        ]
        assert [e.progress for e in events] == [0, 5, 15, 30, 50, 75, 85, 95, 100, 100]
        assert isinstance(events[0].data, StartedData)
        assert events[0].data.reserved_credits == 75

        completed = events[-1].data
        assert isinstance(completed, CompletedData)
        assert completed.summary["firstName"] == "Aria"
        assert completed.asset_enqueue_failed is False
        assert completed.asset_job_id.startswith("avatar_")

        # Text-only: no image analysis call
        assert len(calls) == 2
        assert await ledger.get_balance(USER) == 125
        assert (await reservation_for(ledger)).state == ReservationState.COMMITTED

        characters = await CharacterRepository().list_by_user(USER)
        assert [c.id for c in characters] == [completed.entity_id]
        assert characters[0].generation_session_id == events[0].session_id

        payload = mock_message_queue.publish.await_args.args[1]
        assert payload["entity_id"] == completed.entity_id
        assert payload["generation_type"] == "avatar"

    async def test_text_only_story(self, build, channel, ledger):
        """Test a text-only story is persisted with its cast and charged the base cost."""
        orchestrator, _ = build()

        _, events = await run(orchestrator, channel, text_request())

        assert_well_formed(events)
        assert events[-1].step == GenerationStep.COMPLETED
        assert events[-1].progress == 100
        assert events[-1].data.summary["characterCount"] == 2
        assert events[-1].data.summary["objectiveCount"] == 3
        assert await ledger.get_balance(USER) == 125

        stories = await StoryRepository().list_by_user(USER)
        assert stories[0].title == "The Sky Archive"
        assert stories[0].characters[0].first_name == "Lena"

    async def test_image_story_costs_more(self, build, channel, ledger, mock_storage):
        """Test an image story uploads the image, analyzes it and pays the surcharge."""
        orchestrator, calls = build()

        _, events = await run(orchestrator, channel, image_request())

        assert_well_formed(events)
        assert events[0].data.reserved_credits == 100
        assert events[-1].step == GenerationStep.COMPLETED
        assert calls[0]["marker"] == STORY_IMAGE_ANALYSIS
        mock_storage.upload.assert_awaited_once()
        assert await ledger.get_balance(USER) == 100

        stories = await StoryRepository().list_by_user(USER)
        assert stories[0].age_rating.value == "TEN"

    async def test_mature_requests_use_the_sensitive_route(self, build, channel):
        """Test every capability call of a mature request goes to the sensitive route."""
        orchestrator, calls = build()

        await run(orchestrator, channel, text_request(sensitive=True))

        assert {c["route"] for c in calls} == {"xai"}

    async def test_optional_failure_falls_back_and_charges_in_full(self, build, channel, ledger):
        """Test failed optional story steps emit skip events and still charge in full."""
        orchestrator, _ = build(
            overrides={
                STORY_OBJECTIVES: RuntimeError("rate limited"),
                STORY_TAGS: "no json at all",
            }
        )

        _, events = await run(orchestrator, channel, text_request())

        assert_well_formed(events)
        by_step = {e.step: e for e in events}
        skipped = by_step[GenerationStep.GENERATING_OBJECTIVES].data
        assert isinstance(skipped, StepSkippedData)
        assert "rate limited" in skipped.reason
        assert isinstance(by_step[GenerationStep.GENERATING_TAGS].data, StepSkippedData)

        assert events[-1].step == GenerationStep.COMPLETED
        assert events[-1].data.summary["objectiveCount"] == 4
        assert await ledger.get_balance(USER) == 125

    async def test_failed_image_analysis_keeps_the_text_and_charges_in_full(
        self, build, channel, ledger
    ):
        """Test a character whose image analysis fails completes from its text alone."""
        orchestrator, calls = build(
            overrides={CHARACTER_IMAGE_ANALYSIS: RuntimeError("vision model timeout")}
        )

        _, events = await run(
            orchestrator,
            channel,
            image_request(GenerationDomain.CHARACTER, text="A ranger with a silver braid"),
        )

        assert_well_formed(events)
        assert calls[0]["marker"] == CHARACTER_IMAGE_ANALYSIS
        by_step = {e.step: e for e in events}
        analysis = by_step[GenerationStep.ANALYZING_IMAGE].data
        assert isinstance(analysis, StepSkippedData)
        assert "vision model timeout" in analysis.reason
        assert isinstance(by_step[GenerationStep.EXTRACTING_DESCRIPTION].data, StepSkippedData)

        completed = events[-1]
        assert completed.step == GenerationStep.COMPLETED
        assert completed.progress == 100

        characters = await CharacterRepository().list_by_user(USER)
        assert [c.id for c in characters] == [completed.data.entity_id]
        assert await ledger.get_balance(USER) == 100
        assert (await reservation_for(ledger)).state == ReservationState.COMMITTED

    async def test_enqueue_failure_still_completes(
        self, build, channel, ledger, mock_message_queue
    ):
        """Test a rejected asset job is reported without failing the session."""
        mock_message_queue.publish = AsyncMock(return_value=False)
        orchestrator, _ = build()

        _, events = await run(orchestrator, channel, text_request())

        assert events[-2].step == GenerationStep.QUEUING_ASSET
        assert events[-2].data.enqueue_failed is True
        completed = events[-1].data
        assert completed.asset_enqueue_failed is True
        assert completed.asset_job_id is None
        assert (await reservation_for(ledger)).state == ReservationState.COMMITTED

    async def test_commit_failure_leaves_reservation_held(self, build, channel, ledger):
        """Test a commit error leaves the reservation for the reconciliation sweep."""
        orchestrator, _ = build()

        with patch.object(ledger, "commit", AsyncMock(side_effect=RuntimeError("db gone"))):
            _, events = await run(orchestrator, channel, text_request())

        assert events[-1].step == GenerationStep.COMPLETED
        assert (await reservation_for(ledger)).state == ReservationState.HELD
        assert await ledger.get_balance(USER) == 125

    async def test_progress_delivery_failures_do_not_stop_the_pipeline(self, build, ledger):
        """Test a broken progress channel does not affect persistence or billing."""
        broken_channel = MagicMock()
        broken_channel.publish = AsyncMock(side_effect=RuntimeError("redis down"))
        orchestrator, _ = build(progress_channel=broken_channel)

        session_id = await orchestrator.start(text_request())
        await orchestrator.wait(session_id)

        assert (await reservation_for(ledger)).state == ReservationState.COMMITTED
        assert len(await StoryRepository().list_by_user(USER)) == 1


@pytest.mark.usefixtures("funded")
class TestFailedGeneration:
    """Pipelines that end in ERROR and release their reservation."""

    async def test_required_failure_refunds(self, build, channel, ledger, mock_message_queue):
        """Test a required step failure emits ERROR, persists nothing and refunds."""
        orchestrator, _ = build(overrides={STORY_SCENE: RuntimeError("provider down")})

        _, events = await run(orchestrator, channel, text_request())

        assert_well_formed(events)
        error = events[-1]
        assert error.step == GenerationStep.ERROR
        assert error.progress == 0
        assert error.message == "Generation failed"
        assert isinstance(error.data, ErrorData)
        assert error.data.failed_step == GenerationStep.WRITING_SCENE
        assert "provider down" in error.data.error_detail

        steps = [e.step for e in events]
        assert GenerationStep.PERSISTING not in steps
        assert GenerationStep.COMPLETED not in steps

        assert await ledger.get_balance(USER) == 200
        assert (await reservation_for(ledger)).state == ReservationState.RELEASED
        assert await StoryRepository().list_by_user(USER) == []
        mock_message_queue.publish.assert_not_awaited()

    async def test_unusable_image_fails_at_upload(self, build, channel, ledger):
        """Test undecodable image bytes fail the upload step."""
        orchestrator, _ = build()
        request = GenerationRequest(
            requester_id=USER,
            domain=GenerationDomain.CHARACTER,
            image=ImageInput(content=b"not an image", content_type="image/png"),
        )

        _, events = await run(orchestrator, channel, request)

        assert events[-1].data.failed_step == GenerationStep.UPLOADING_IMAGE
        assert await ledger.get_balance(USER) == 200

    async def test_persistence_failure_refunds(self, build, channel, ledger):
        """Test a repository error fails the PERSISTING step and refunds."""
        failing = MagicMock()
        failing.create_from_draft = AsyncMock(side_effect=RuntimeError("constraint violated"))
        orchestrator, _ = build(
            repositories={
                GenerationDomain.CHARACTER: CharacterRepository(),
                GenerationDomain.STORY: failing,
            }
        )

        _, events = await run(orchestrator, channel, text_request())

        assert events[-1].step == GenerationStep.ERROR
        assert events[-1].data.failed_step == GenerationStep.PERSISTING
        assert "constraint violated" in events[-1].data.error_detail
        assert await ledger.get_balance(USER) == 200

    async def test_cancelled_pipeline_refunds(self, build, channel, ledger):
        """Test cancelling a running pipeline emits ERROR and releases the reservation."""
        orchestrator, _ = build()
        entered = asyncio.Event()

        async def hang(definition, context):
            entered.set()
            await asyncio.Event().wait()

        with patch("packages.generation.services.orchestrator.execute_step", hang):
            request = text_request()
            session_id = await orchestrator.start(request)
            subscription = await channel.join(
                build_topic(request.domain, request.requester_id, session_id)
            )
            await asyncio.wait_for(entered.wait(), timeout=2)

            orchestrator._tasks[session_id].cancel()
            with pytest.raises(asyncio.CancelledError):
                await orchestrator.wait(session_id)

        events = [e async for e in subscription]
        assert events[0].step == GenerationStep.STARTED
        error = events[-1]
        assert error.step == GenerationStep.ERROR
        assert error.data.failed_step == GenerationStep.UPLOADING_IMAGE
        assert error.data.error_detail == "Generation cancelled"

        assert await ledger.get_balance(USER) == 200
        assert (await reservation_for(ledger)).state == ReservationState.RELEASED
        assert orchestrator.get_session_status(session_id, USER) is None


class TestIntake:
    """Synchronous checks made before any credits are reserved."""

    @pytest.mark.parametrize(
        "request_",
        [
            text_request(text=None),
            text_request(text="   "),
            text_request(text="x" * 2001),
            GenerationRequest(
                requester_id=USER,
                domain=GenerationDomain.STORY,
                image=ImageInput(content=b"%PDF-1.4", content_type="application/pdf"),
            ),
            GenerationRequest(
                requester_id=USER,
                domain=GenerationDomain.STORY,
                image=ImageInput(content=b"", content_type="image/png"),
            ),
        ],
    )
    async def test_invalid_requests_reserve_nothing(self, build, ledger, funded, request_):
        """Test invalid input is rejected without a reservation or a session."""
        orchestrator, _ = build()

        with pytest.raises(ValidationError):
            await orchestrator.start(request_)

        _, total = await ledger.get_transactions(USER)
        assert total == 1
        assert len(orchestrator.registry) == 0

    async def test_insufficient_credits_for_image_request(self, build, ledger):
        """Test a short balance reports the required and available credits."""
        await ledger.grant(USER, 50)
        orchestrator, _ = build()

        with pytest.raises(InsufficientCreditsError) as exc_info:
            await orchestrator.start(image_request())

        assert exc_info.value.required == 100
        assert exc_info.value.available == 50
        assert await ledger.get_balance(USER) == 50
        assert len(orchestrator.registry) == 0


@pytest.mark.usefixtures("funded")
class TestSessionQueries:
    """Polling snapshots and session lifecycle bookkeeping."""

    async def test_status_is_visible_to_the_owner_only(self, build):
        """Test only the requester sees a snapshot, and only while the session is active."""
        orchestrator, _ = build()

        session_id = await orchestrator.start(text_request())

        snapshot = orchestrator.get_session_status(session_id, USER)
        assert snapshot.session_id == session_id
        assert snapshot.status == SessionStatus.PENDING
        assert orchestrator.get_session_status(session_id, "someone-else") is None

        await orchestrator.wait(session_id)

        assert orchestrator.get_session_status(session_id, USER) is None
        assert len(orchestrator.registry) == 0
        assert orchestrator._tasks == {}

    async def test_shutdown_drains_sessions(self, build, ledger):
        """Test shutdown waits for in-flight pipelines to settle."""
        orchestrator, _ = build()
        await orchestrator.start(text_request())

        await orchestrator.shutdown()

        assert len(orchestrator.registry) == 0
        assert (await reservation_for(ledger)).state == ReservationState.COMMITTED

    async def test_wait_for_unknown_session_returns(self, build):
        """Test waiting on an unknown session returns at once."""
        orchestrator, _ = build()
        await orchestrator.wait("missing")
