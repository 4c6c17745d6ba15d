from typing import Optional

from common.core.config import settings
from common.core.constants import ProgressChannelProvider
from common.core.otel_axiom_exporter import get_logger

from .interface import ProgressChannelInterface
from .memory import InMemoryProgressChannel
from .redis_channel import RedisProgressChannel

logger = get_logger(__name__)

# Global instance
_progress_channel: Optional[ProgressChannelInterface] = None


def get_progress_channel() -> ProgressChannelInterface:
    """Return the process-wide channel selected by ``settings.progress_channel_provider``."""
    global _progress_channel

    if _progress_channel is None:
        match settings.progress_channel_provider:
            case ProgressChannelProvider.MEMORY:
                _progress_channel = InMemoryProgressChannel()
            case ProgressChannelProvider.REDIS:
                _progress_channel = RedisProgressChannel()
            case _:
                raise ValueError(
                    f"Unknown progress channel provider: {settings.progress_channel_provider}"
                )
        logger.info(
            f"Initialized {settings.progress_channel_provider.value} progress channel"
        )

    return _progress_channel
