"""
Process entry point for periodic workers.

Sets up telemetry and logging, builds the worker, and maps SIGINT/SIGTERM to
``request_stop`` so the sweep in flight finishes before the process exits.
"""

import argparse
import asyncio
import logging
import signal
from typing import Callable, Dict, List, Optional

from common.core.otel_axiom_exporter import _initialize_telemetry, get_logger
from common.workers.periodic_worker import PeriodicWorker

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


class WorkerLauncher:
    def __init__(self):
        self.logger = get_logger(__name__)
        self.worker_instance: Optional[PeriodicWorker] = None

    def _handle_signal(self, signum: int) -> None:
        self.logger.info(
            f"Received {signal.Signals(signum).name}, stopping after the current sweep"
        )
        if self.worker_instance:
            self.worker_instance.request_stop()

    def _register_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> None:
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(signum, self._handle_signal, signum)

    async def _serve(self, worker: PeriodicWorker, worker_name: str) -> None:
        self.worker_instance = worker
        self._register_signal_handlers(asyncio.get_running_loop())

        try:
            self.logger.info(f"Starting {worker_name} ({worker.worker_id})")
            await worker.start()
        except Exception as e:
            self.logger.error(f"{worker_name} crashed: {e}", exc_info=True)
        finally:
            await worker.stop()
            self.logger.info(f"{worker_name} shut down after {worker.iterations} sweeps")

    def run(
        self,
        worker_factory: Callable[..., PeriodicWorker],
        worker_name: str,
        setup_logging: bool = True,
        factory_kwargs: Optional[Dict] = None,
        log_level: Optional[str] = None,
    ) -> None:
        """
        Build a worker and block until it stops.

        Args:
            worker_factory: Callable returning the worker, usually its class
            worker_name: Human readable name for logging
            setup_logging: Configure the root logger
            factory_kwargs: Keyword arguments for ``worker_factory``
            log_level: Root log level override, e.g. "DEBUG"
        """
        _initialize_telemetry()

        if setup_logging:
            logging.basicConfig(
                level=logging.INFO,
                format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                force=True,
            )
        if log_level:
            logging.getLogger().setLevel(getattr(logging, log_level))

        worker = worker_factory(**(factory_kwargs or {}))
        asyncio.run(self._serve(worker, worker_name))

    def run_from_cli(
        self,
        worker_factory: Callable[..., PeriodicWorker],
        worker_name: str,
        default_interval: float,
        argv: Optional[List[str]] = None,
    ) -> None:
        """Parse ``--interval`` and ``--log-level`` and run the worker."""
        parser = argparse.ArgumentParser(description=worker_name)
        parser.add_argument(
            "--interval",
            type=float,
            default=default_interval,
            help=f"Seconds between sweeps (default: {default_interval})",
        )
        parser.add_argument(
            "--log-level", choices=LOG_LEVELS, default="INFO", help="Log level"
        )
        args = parser.parse_args(argv)

        self.run(
            worker_factory,
            worker_name,
            factory_kwargs={"interval_seconds": args.interval},
            log_level=args.log_level,
        )
