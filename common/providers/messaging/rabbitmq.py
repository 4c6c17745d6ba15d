from typing import Dict, Any, Optional, Set
import json
import aio_pika
from aio_pika import connect_robust, Message
from urllib.parse import quote

from opentelemetry import trace

from common.core.config import settings
from .interface import MessageQueueInterface
from common.core.otel_axiom_exporter import get_logger, inject_trace_context

logger = get_logger(__name__)

tracer = trace.get_tracer(__name__)


class QueueConfig:
    DLQ_MESSAGE_TTL_MS = 86400000  # 24 hours
    DLQ_MAX_LENGTH = 10000
    DLX_SUFFIX = ".dlx"
    DLQ_SUFFIX = ".dlq"


class RabbitMQClient(MessageQueueInterface):
    def __init__(self):
        self.connection = None
        self.channel = None
        self.host = settings.rabbitmq_host
        self.port = settings.rabbitmq_port
        self.username = settings.rabbitmq_username
        self.password = settings.rabbitmq_password
        self.vhost = settings.rabbitmq_vhost
        self.max_priority = settings.rabbitmq_max_priority
        self._declared: Set[str] = set()

    @property
    def url(self) -> str:
        vhost = quote(self.vhost, safe="")
        return f"amqp://{quote(self.username)}:{quote(self.password)}@{self.host}:{self.port}/{vhost}"

    async def connect(self) -> bool:
        try:
            # Robust connection reconnects on its own
            self.connection = await connect_robust(self.url)
            self.channel = await self.connection.channel(publisher_confirms=True)
            logger.info("Connected to RabbitMQ with publisher confirms")
            return True
        except Exception as e:
            logger.error(f"Failed to connect to RabbitMQ: {e}")
            return False

    async def disconnect(self) -> None:
        try:
            if self.channel and not self.channel.is_closed:
                await self.channel.close()
            if self.connection and not self.connection.is_closed:
                await self.connection.close()
            self._declared.clear()
            logger.info("Disconnected from RabbitMQ")
        except Exception as e:
            logger.error(f"Error disconnecting from RabbitMQ: {e}")

    async def _ensure_channel(self) -> bool:
        if self.channel and not self.channel.is_closed:
            return True
        return await self.connect()

    async def _setup_dead_letter_queue(self, queue_name: str) -> Dict[str, str]:
        dlx_name = f"{queue_name}{QueueConfig.DLX_SUFFIX}"
        dlq_name = f"{queue_name}{QueueConfig.DLQ_SUFFIX}"

        await self.channel.declare_exchange(
            name=dlx_name, type=aio_pika.ExchangeType.DIRECT, durable=True
        )
        dlq = await self.channel.declare_queue(
            dlq_name,
            durable=True,
            arguments={
                "x-message-ttl": QueueConfig.DLQ_MESSAGE_TTL_MS,
                "x-max-length": QueueConfig.DLQ_MAX_LENGTH,
            },
        )
        await dlq.bind(dlx_name, routing_key=queue_name)

        return {
            "x-dead-letter-exchange": dlx_name,
            "x-dead-letter-routing-key": queue_name,
        }

    async def declare_queue(
        self, queue: str, durable: bool = True, dlq_enabled: bool = True
    ) -> bool:
        if queue in self._declared:
            return True
        try:
            if not await self._ensure_channel():
                return False

            arguments: Dict[str, Any] = {"x-max-priority": self.max_priority}
            if dlq_enabled:
                arguments.update(await self._setup_dead_letter_queue(queue))

            await self.channel.declare_queue(queue, durable=durable, arguments=arguments)
            self._declared.add(queue)
            logger.info(f"Declared queue: {queue} (DLQ enabled: {dlq_enabled})")
            return True
        except Exception as e:
            logger.error(f"Failed to declare queue {queue}: {e}")
            return False

    async def publish(
        self,
        queue: str,
        message: Dict[str, Any],
        priority: Optional[int] = None,
    ) -> bool:
        with tracer.start_as_current_span("rabbitmq.publish") as span:
            span.set_attribute("messaging.system", "rabbitmq")
            span.set_attribute("messaging.destination", queue)
            try:
                if not await self.declare_queue(queue):
                    return False

                msg = Message(
                    body=json.dumps(message).encode(),
                    delivery_mode=aio_pika.DeliveryMode.PERSISTENT,
                    content_type="application/json",
                    headers=inject_trace_context(),
                    priority=priority,
                )

                # With publisher confirms this raises when the broker nacks
                await self.channel.default_exchange.publish(
                    msg, routing_key=queue, mandatory=True
                )
                logger.info(f"Published message to queue {queue}")
                return True
            except Exception as e:
                span.record_exception(e)
                logger.error(f"Failed to publish message to {queue}: {e}")
                return False
