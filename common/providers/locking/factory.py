from typing import Optional

from common.core.config import settings
from common.core.constants import LockProvider
from common.core.otel_axiom_exporter import get_logger

from .interface import DistributedLockInterface
from .memory_lock import MemoryLock
from .redis_lock import RedisLock

logger = get_logger(__name__)

# Global instance
_lock_provider: Optional[DistributedLockInterface] = None


def get_lock_provider() -> DistributedLockInterface:
    """Return the process-wide lock provider selected by ``settings.lock_provider``."""
    global _lock_provider

    if _lock_provider is None:
        match settings.lock_provider:
            case LockProvider.MEMORY:
                _lock_provider = MemoryLock()
            case LockProvider.REDIS:
                _lock_provider = RedisLock()
            case _:
                raise ValueError(f"Unknown lock provider: {settings.lock_provider}")
        logger.info(f"Initialized {settings.lock_provider.value} lock provider")

    return _lock_provider
