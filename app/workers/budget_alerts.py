# app/workers/budget_alerts.py
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional

from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.clock import SystemClock, system_clock
from app.core.config import settings
from app.core.database import AsyncSessionLocal
from app.core.db_utils import with_db_retry
from app.crud.budget import get_budgets_for_period, mark_alert_sent
from app.crud.transaction import get_expenses_for_categories
from app.models.budget import Budget, ALERT_THRESHOLDS
from app.utils.budgeting import compute_snapshot, period_bounds, usage_ratio
from app.utils.notifications import Notifier

logger = logging.getLogger(__name__)


@dataclass
class AlertResult:
    evaluated: int = 0
    sent: int = 0
    failed: int = 0


class BudgetAlertEvaluator:
    """
    Sends the one-time 50/80/100% alerts for the current month's budgets.

    Thresholds are walked in ascending order. A flag is set only after the
    notifier confirmed delivery, and a failed delivery stops the higher
    thresholds of that budget until the next tick.
    """

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        session_factory: async_sessionmaker = AsyncSessionLocal,
        clock: SystemClock = system_clock,
        history_months: int = settings.BUDGET_HISTORY_MONTHS,
    ):
        self.session_factory = session_factory
        self.notifier = notifier or Notifier(session_factory)
        self.clock = clock
        self.history_months = history_months

    @with_db_retry()
    async def _load_budgets(self, month: int, year: int) -> List[Budget]:
        async with self.session_factory() as db:
            return await get_budgets_for_period(month, year, db)

    async def run_once(self, should_stop: Callable[[], bool] = lambda: False) -> AlertResult:
        today = self.clock.today()
        result = AlertResult()

        budgets = await self._load_budgets(today.month, today.year)
        logger.info(f"🔔 Evaluating alerts for {len(budgets)} budgets ({today.year}-{today.month:02d})")

        for budget in budgets:
            if should_stop():
                logger.info("Stop requested, leaving remaining budgets for the next tick")
                break
            try:
                await self._evaluate(budget, today, result)
            except Exception:
                result.failed += 1
                logger.exception(f"❌ Failed to evaluate alerts for budget {budget.id}")

        logger.info(f"Budget alerts done: {result.sent} sent, {result.failed} failed")
        return result

    async def _evaluate(self, budget: Budget, today: date, result: AlertResult) -> None:
        if budget.amount is None or budget.amount <= 0:
            return
        pending = [
            t for t in ALERT_THRESHOLDS
            if budget.alert_enabled(t) and not budget.alert_sent(t)
        ]
        if not pending:
            return

        start, end = period_bounds(budget.year, budget.month)
        async with self.session_factory() as db:
            expenses = await get_expenses_for_categories(budget.user_id, [budget.category_id], start, end, db)
        snapshot = compute_snapshot(budget, expenses, today, self.history_months)
        result.evaluated += 1

        used = usage_ratio(snapshot.spent, float(budget.amount))
        for threshold in pending:
            if used < threshold:
                break

            delivered = await self.notifier.send_goal_or_budget_alert(
                budget.user_id,
                budget.category_name or "Budget",
                snapshot.spent,
                float(budget.amount),
                snapshot.percentage_used,
                threshold=threshold,
                category_id=budget.category_id,
            )
            if not delivered:
                result.failed += 1
                logger.warning(f"Alert {threshold}% for budget {budget.id} not delivered, will retry next tick")
                break

            async with self.session_factory() as db:
                if await mark_alert_sent(budget.id, threshold, db):
                    await db.commit()
                    result.sent += 1
                    logger.info(f"✅ Sent {threshold}% alert for budget {budget.id} ({snapshot.percentage_used}%)")
                else:
                    await db.rollback()
                    logger.info(f"Alert {threshold}% for budget {budget.id} was already marked sent")
