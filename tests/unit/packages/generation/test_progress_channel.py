import asyncio
import json
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from common.core.constants import ProgressChannelProvider
from packages.generation.models.domain.enums import GenerationDomain, GenerationStep
from packages.generation.models.domain.progress import (
    CompletedData,
    ErrorData,
    ProgressEvent,
    StoryConceptData,
)
from packages.generation.progress import factory as channel_factory
from packages.generation.progress.memory import InMemoryProgressChannel
from packages.generation.progress.redis_channel import (
    RedisProgressChannel,
    RedisProgressSubscription,
)
from packages.generation.progress.topics import build_topic

TOPIC = "story-generation:u1:sess-1"


def event(step, progress, data=None):
    return ProgressEvent(
        session_id="sess-1", step=step, progress=progress, message=step.value, data=data
    )


COMPLETED = event(
    GenerationStep.COMPLETED,
    100,
    CompletedData(entity_id=1, domain=GenerationDomain.STORY, summary={"title": "Sky"}),
)


class TestTopicsAndWireFormat:
    """Topic names and the client wire format of events."""

    def test_topic(self):
        """Test topics are built from domain, user and session."""
        assert build_topic(GenerationDomain.STORY, "u1", "sess-1") == TOPIC

    def test_wire_shape_is_camel_cased(self):
        """Test event data is sent with camelCase keys."""
        wire = event(
            GenerationStep.GENERATING_CONCEPT,
            45,
            StoryConceptData(title="Sky", synopsis="s", genre="fantasy"),
        ).to_wire()

        assert wire == {
            "step": "GENERATING_CONCEPT",
            "progress": 45,
            "message": "GENERATING_CONCEPT",
            "data": {
                "kind": "story_concept",
                "title": "Sky",
                "synopsis": "s",
                "genre": "fantasy",
                "mood": None,
                "setting": None,
            },
        }

    def test_wire_omits_missing_data(self):
        """Test events without data omit the data key."""
        assert "data" not in event(GenerationStep.UPLOADING_IMAGE, 5).to_wire()

    def test_error_data(self):
        """Test ERROR events carry the failed step and detail."""
        wire = event(
            GenerationStep.ERROR,
            0,
            ErrorData(failed_step=GenerationStep.WRITING_SCENE, error_detail="boom"),
        ).to_wire()

        assert wire["data"]["failedStep"] == "WRITING_SCENE"
        assert wire["data"]["errorDetail"] == "boom"

    def test_progress_bounds(self):
        """Test progress outside 0 to 100 is rejected."""
        with pytest.raises(ValueError):
            event(GenerationStep.PERSISTING, 101)

    def test_json_round_trip_keeps_variant(self):
        """Test JSON parsing restores the right data variant."""
        restored = ProgressEvent.model_validate_json(COMPLETED.model_dump_json())

        assert isinstance(restored.data, CompletedData)
        assert restored.is_terminal


class TestInMemoryProgressChannel:
    """Single-process progress fan-out."""

    async def test_publish_without_subscribers_is_dropped(self):
        """Test events with no subscribers are dropped."""
        channel = InMemoryProgressChannel()

        assert await channel.publish(TOPIC, event(GenerationStep.STARTED, 0)) is True
        assert channel.subscriber_count(TOPIC) == 0

    async def test_events_are_delivered_in_order_until_terminal(self):
        """Test events arrive in order and iteration stops at the terminal one."""
        channel = InMemoryProgressChannel()
        subscription = await channel.join(TOPIC)

        await channel.publish(TOPIC, event(GenerationStep.STARTED, 0))
        await channel.publish(TOPIC, event(GenerationStep.UPLOADING_IMAGE, 5))
        await channel.publish(TOPIC, COMPLETED)

        steps = [e.step async for e in subscription]

        assert steps == [
            GenerationStep.STARTED,
            GenerationStep.UPLOADING_IMAGE,
            GenerationStep.COMPLETED,
        ]
        assert channel.subscriber_count(TOPIC) == 0

    async def test_every_subscriber_gets_every_event(self):
        """Test each subscriber receives its own copy of every event."""
        channel = InMemoryProgressChannel()
        first = await channel.join(TOPIC)
        second = await channel.join(TOPIC)

        await channel.publish(TOPIC, COMPLETED)

        assert (await first.__anext__()).step == GenerationStep.COMPLETED
        assert (await second.__anext__()).step == GenerationStep.COMPLETED

    async def test_topics_are_isolated(self):
        """Test subscribers only see their own topic."""
        channel = InMemoryProgressChannel()
        subscription = await channel.join(TOPIC)

        await channel.publish("story-generation:u2:other", COMPLETED)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(subscription.__anext__(), timeout=0.05)

    async def test_close_detaches(self):
        """Test closing a subscription detaches it from the topic."""
        channel = InMemoryProgressChannel()
        async with await channel.join(TOPIC):
            assert channel.subscriber_count(TOPIC) == 1

        assert channel.subscriber_count(TOPIC) == 0


class TestRedisProgressChannel:
    """Redis pub/sub progress channel against a mocked client."""

    @pytest.fixture
    def redis_client(self):
        client = MagicMock()
        client.publish = AsyncMock(return_value=1)
        return client

    async def test_publish_sends_json(self, redis_client):
        """Test events are published as JSON on the topic."""
        channel = RedisProgressChannel(url="redis://test:6379/0")
        channel._client = redis_client

        assert await channel.publish(TOPIC, COMPLETED) is True

        topic, payload = redis_client.publish.await_args.args
        assert topic == TOPIC
        assert json.loads(payload)["step"] == "COMPLETED"

    async def test_publish_failure_returns_false(self, redis_client):
        """Test a Redis error makes publish return False."""
        redis_client.publish.side_effect = ConnectionError("down")
        channel = RedisProgressChannel(url="redis://test:6379/0")
        channel._client = redis_client

        assert await channel.publish(TOPIC, COMPLETED) is False

    async def test_subscription_skips_noise_and_stops_after_terminal(self):
        """Test non-message frames are skipped and iteration stops at the terminal event."""
        pubsub = MagicMock()
        pubsub.get_message = AsyncMock(
            side_effect=[
                None,
                {"type": "message", "data": "not json"},
                {"type": "message", "data": event(GenerationStep.STARTED, 0).model_dump_json()},
                {"type": "message", "data": COMPLETED.model_dump_json()},
            ]
        )
        pubsub.unsubscribe = AsyncMock()
        pubsub.aclose = AsyncMock()
        subscription = RedisProgressSubscription(pubsub, TOPIC)

        steps = [e.step async for e in subscription]

        assert steps == [GenerationStep.STARTED, GenerationStep.COMPLETED]
        pubsub.unsubscribe.assert_awaited_once_with(TOPIC)


class TestProgressChannelFactory:
    """Provider selection from settings."""

    @pytest.fixture(autouse=True)
    def reset_channel(self, monkeypatch):
        monkeypatch.setattr(channel_factory, "_progress_channel", None)

    def test_memory_channel(self):
        """Test the memory provider yields an in-memory channel."""
        with patch.object(
            channel_factory.settings, "progress_channel_provider", ProgressChannelProvider.MEMORY
        ):
            channel = channel_factory.get_progress_channel()

        assert isinstance(channel, InMemoryProgressChannel)
        assert channel_factory.get_progress_channel() is channel

    def test_redis_channel(self):
        """Test the redis provider yields a Redis channel."""
        with patch.object(
            channel_factory.settings, "progress_channel_provider", ProgressChannelProvider.REDIS
        ):
            assert isinstance(channel_factory.get_progress_channel(), RedisProgressChannel)
