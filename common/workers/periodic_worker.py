import asyncio
from abc import ABC, abstractmethod
from typing import Optional
from uuid import uuid4

from common.core.otel_axiom_exporter import get_logger

logger = get_logger(__name__)


class PeriodicWorker(ABC):
    """Base worker that runs ``run_once`` every ``interval_seconds`` until stopped."""

    def __init__(
        self,
        name: str,
        interval_seconds: float,
        worker_id: Optional[str] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.name = name
        self.interval_seconds = interval_seconds
        self.worker_id = worker_id or f"{name}_worker_{uuid4()}"
        self.running = False
        self.iterations = 0
        self._stop_event: Optional[asyncio.Event] = None

    async def setup(self):
        """Initialize worker dependencies."""
        # Setup lock provider if this worker has one
        if hasattr(self, "lock_provider"):
            await self.lock_provider.connect()
        logger.info(f"Worker {self.worker_id} setup completed")

    async def cleanup(self):
        """Cleanup worker resources."""
        try:
            if hasattr(self, "lock_provider"):
                await self.lock_provider.disconnect()
            logger.info(f"Worker {self.worker_id} cleanup completed")
        except Exception as e:
            logger.error(f"Error cleaning up worker {self.worker_id}: {e}")

    async def start(self, max_iterations: Optional[int] = None):
        """Run until stopped, or until ``max_iterations`` runs have happened."""
        if self.running:
            logger.warning(f"Worker {self.worker_id} is already running")
            return

        self.running = True
        self._stop_event = asyncio.Event()
        logger.info(
            f"Starting worker {self.worker_id} every {self.interval_seconds}s"
        )

        try:
            await self.setup()
            while self.running:
                await self._run_iteration()
                if max_iterations is not None and self.iterations >= max_iterations:
                    break
                try:
                    await asyncio.wait_for(
                        self._stop_event.wait(), timeout=self.interval_seconds
                    )
                except asyncio.TimeoutError:
                    pass
        finally:
            self.running = False
            await self.cleanup()

    async def _run_iteration(self):
        self.iterations += 1
        try:
            await self.run_once()
        except Exception as e:
            # One bad run must not stop the schedule
            logger.error(
                f"Worker {self.worker_id} iteration {self.iterations} failed: {e}",
                exc_info=True,
            )

    def request_stop(self):
        """Signal-safe stop request."""
        self.running = False
        if self._stop_event is not None:
            self._stop_event.set()

    async def stop(self):
        """Stop the worker."""
        self.request_stop()
        logger.info(f"Stopping worker {self.worker_id}")

    @abstractmethod
    async def run_once(self):
        """One unit of periodic work. Must be implemented by subclasses."""
        pass
