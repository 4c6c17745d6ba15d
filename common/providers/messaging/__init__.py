from .interface import MessageQueueInterface
from .rabbitmq import RabbitMQClient
from .factory import get_message_queue

__all__ = ["MessageQueueInterface", "RabbitMQClient", "get_message_queue"]
