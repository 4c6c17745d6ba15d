from common.core.config import settings
from common.workers.launcher import WorkerLauncher
from packages.credits.workers.reconciliation_worker import CreditReconciliationWorker


def main():
    WorkerLauncher().run_from_cli(
        worker_factory=CreditReconciliationWorker,
        worker_name="Credit Reconciliation Worker",
        default_interval=settings.reconciliation_interval_seconds,
    )


if __name__ == "__main__":
    main()
