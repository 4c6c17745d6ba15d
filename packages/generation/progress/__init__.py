from .interface import ProgressChannelInterface, ProgressSubscription
from .memory import InMemoryProgressChannel
from .redis_channel import RedisProgressChannel
from .factory import get_progress_channel
from .topics import build_topic

__all__ = [
    "ProgressChannelInterface",
    "ProgressSubscription",
    "InMemoryProgressChannel",
    "RedisProgressChannel",
    "get_progress_channel",
    "build_topic",
]
