from typing import Optional

from .interface import MessageQueueInterface
from .rabbitmq import RabbitMQClient

_message_queue: Optional[MessageQueueInterface] = None


def get_message_queue() -> MessageQueueInterface:
    """Shared RabbitMQ client; connects lazily on first publish."""
    global _message_queue
    if _message_queue is None:
        _message_queue = RabbitMQClient()
    return _message_queue
