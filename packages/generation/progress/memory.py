import asyncio
from collections import defaultdict
from typing import Dict, Set

from packages.generation.models.domain.progress import ProgressEvent
from .interface import ProgressChannelInterface, ProgressSubscription
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)


class InMemoryProgressSubscription(ProgressSubscription):
    def __init__(self, channel: "InMemoryProgressChannel", topic: str):
        self._channel = channel
        self.topic = topic
        self.queue: asyncio.Queue[ProgressEvent] = asyncio.Queue()
        self._done = False

    async def __anext__(self) -> ProgressEvent:
        if self._done:
            raise StopAsyncIteration
        event = await self.queue.get()
        if event.is_terminal:
            self._done = True
            self._channel._detach(self)
        return event

    async def close(self) -> None:
        self._done = True
        self._channel._detach(self)


class InMemoryProgressChannel(ProgressChannelInterface):
    """Single-process channel: one asyncio.Queue per subscriber."""

    def __init__(self):
        self._subscribers: Dict[str, Set[InMemoryProgressSubscription]] = defaultdict(set)

    async def publish(self, topic: str, event: ProgressEvent) -> bool:
        subscribers = self._subscribers.get(topic)
        if not subscribers:
            logger.debug(f"No subscribers on {topic}, dropping {event.step.value}")
            return True
        for subscription in list(subscribers):
            subscription.queue.put_nowait(event)
        return True

    async def join(self, topic: str) -> ProgressSubscription:
        subscription = InMemoryProgressSubscription(self, topic)
        self._subscribers[topic].add(subscription)
        return subscription

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))

    def _detach(self, subscription: InMemoryProgressSubscription) -> None:
        subscribers = self._subscribers.get(subscription.topic)
        if subscribers is None:
            return
        subscribers.discard(subscription)
        if not subscribers:
            del self._subscribers[subscription.topic]
