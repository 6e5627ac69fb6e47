# app/workers/__init__.py
from typing import List

from app.core.config import settings
from app.workers.runner import PeriodicWorker
from app.workers.recurring_generator import RecurringTransactionGenerator
from app.workers.budget_alerts import BudgetAlertEvaluator


def build_workers() -> List[PeriodicWorker]:
    """The background workers started with the application."""
    return [
        PeriodicWorker(
            "recurring-transactions",
            RecurringTransactionGenerator(),
            interval=settings.RECURRING_INTERVAL_SECONDS,
            initial_delay=settings.WORKER_INITIAL_DELAY_SECONDS,
            retry_delay=settings.WORKER_RETRY_DELAY_SECONDS,
        ),
        PeriodicWorker(
            "budget-alerts",
            BudgetAlertEvaluator(),
            interval=settings.BUDGET_ALERT_INTERVAL_SECONDS,
            initial_delay=settings.WORKER_INITIAL_DELAY_SECONDS,
            retry_delay=settings.WORKER_RETRY_DELAY_SECONDS,
        ),
    ]
