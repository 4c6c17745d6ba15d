from typing import Optional
import redis.asyncio as redis
from redis.asyncio.client import PubSub

from common.core.config import settings
from packages.generation.models.domain.progress import ProgressEvent
from .interface import ProgressChannelInterface, ProgressSubscription
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)

POLL_TIMEOUT_SECONDS = 1.0


class RedisProgressSubscription(ProgressSubscription):
    def __init__(self, pubsub: PubSub, topic: str):
        self._pubsub = pubsub
        self.topic = topic
        self._done = False

    async def __anext__(self) -> ProgressEvent:
        while not self._done:
            message = await self._pubsub.get_message(
                ignore_subscribe_messages=True, timeout=POLL_TIMEOUT_SECONDS
            )
            if message is None or message.get("type") != "message":
                continue
            try:
                event = ProgressEvent.model_validate_json(message["data"])
            except ValueError as e:
                logger.warning(f"Dropping malformed progress message on {self.topic}: {e}")
                continue
            if event.is_terminal:
                await self.close()
            return event
        raise StopAsyncIteration

    async def close(self) -> None:
        if self._done:
            return
        self._done = True
        try:
            await self._pubsub.unsubscribe(self.topic)
            await self._pubsub.aclose()
        except Exception as e:
            logger.warning(f"Error closing subscription on {self.topic}: {e}")


class RedisProgressChannel(ProgressChannelInterface):
    """Redis pub/sub channel for multi-process deployments."""

    def __init__(self, url: Optional[str] = None):
        self.url = url or settings.redis_connection_url
        self._client: Optional[redis.Redis] = None

    def _get_client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.Redis.from_url(self.url, decode_responses=True)
        return self._client

    async def publish(self, topic: str, event: ProgressEvent) -> bool:
        try:
            await self._get_client().publish(topic, event.model_dump_json())
            return True
        except Exception as e:
            logger.error(f"Failed to publish {event.step.value} to {topic}: {e}")
            return False

    async def join(self, topic: str) -> ProgressSubscription:
        pubsub = self._get_client().pubsub()
        await pubsub.subscribe(topic)
        return RedisProgressSubscription(pubsub, topic)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.info("Redis progress channel disconnected")
