import time
import uuid
from dataclasses import dataclass
from typing import Dict, Optional

from .interface import DistributedLockInterface
from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)


@dataclass
class _Held:
    token: str
    expires_at: float

    def is_expired(self) -> bool:
        return time.monotonic() >= self.expires_at


class MemoryLock(DistributedLockInterface):
    """
    Process-local lock with the same contract as RedisLock.

    Only serializes callers inside one event loop; use it for single-process
    runs and tests.
    """

    def __init__(self):
        self._locks: Dict[str, _Held] = {}
        logger.info("Memory lock provider initialized")

    def _live(self, resource_key: str) -> Optional[_Held]:
        held = self._locks.get(resource_key)
        if held and held.is_expired():
            del self._locks[resource_key]
            return None
        return held

    async def acquire_lock(
        self, resource_key: str, timeout_seconds: int = 30
    ) -> Optional[str]:
        if self._live(resource_key):
            return None
        token = str(uuid.uuid4())
        self._locks[resource_key] = _Held(token, time.monotonic() + timeout_seconds)
        return token

    async def release_lock(self, resource_key: str, lock_token: str) -> bool:
        held = self._live(resource_key)
        if not held or held.token != lock_token:
            return False
        del self._locks[resource_key]
        return True

    async def extend_lock(
        self, resource_key: str, lock_token: str, additional_seconds: int
    ) -> bool:
        held = self._live(resource_key)
        if not held or held.token != lock_token:
            return False
        held.expires_at = time.monotonic() + additional_seconds
        return True

    async def is_locked(self, resource_key: str) -> bool:
        return self._live(resource_key) is not None
