import asyncio
import uuid

from packages.generation.models.domain.enums import GenerationDomain, GenerationStep
from packages.generation.models.domain.progress import CompletedData, ProgressEvent
from packages.generation.progress.topics import build_topic


def event(step, progress, data=None):
    return ProgressEvent(
        session_id="sess-1", step=step, progress=progress, message=step.value, data=data
    )


class TestRedisProgressChannelIntegration:
    """Progress fan-out through a real Redis pub/sub."""

    async def test_subscriber_receives_events_until_terminal(self, redis_channel):
        """Test a subscriber gets events in order and stops at the terminal one."""
        topic = build_topic(GenerationDomain.STORY, "u1", uuid.uuid4().hex)
        subscription = await redis_channel.join(topic)

        await redis_channel.publish(topic, event(GenerationStep.STARTED, 0))
        await redis_channel.publish(topic, event(GenerationStep.GENERATING_CONCEPT, 30))
        await redis_channel.publish(
            topic,
            event(
                GenerationStep.COMPLETED,
                100,
                CompletedData(entity_id=1, domain=GenerationDomain.STORY, summary={}),
            ),
        )

        async def collect():
            return [e async for e in subscription]

        received = await asyncio.wait_for(collect(), timeout=5)

        assert [e.step for e in received] == [
            GenerationStep.STARTED,
            GenerationStep.GENERATING_CONCEPT,
            GenerationStep.COMPLETED,
        ]
        assert isinstance(received[-1].data, CompletedData)

    async def test_topics_are_isolated(self, redis_channel):
        """Test events on one topic never reach another topic's subscriber."""
        mine = build_topic(GenerationDomain.STORY, "u1", uuid.uuid4().hex)
        other = build_topic(GenerationDomain.STORY, "u2", uuid.uuid4().hex)
        subscription = await redis_channel.join(mine)

        await redis_channel.publish(other, event(GenerationStep.ERROR, 0))
        await redis_channel.publish(mine, event(GenerationStep.ERROR, 0))

        received = await asyncio.wait_for(subscription.__anext__(), timeout=5)
        assert received.step == GenerationStep.ERROR
        await subscription.close()
