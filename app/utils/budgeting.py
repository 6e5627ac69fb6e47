# app/utils/budgeting.py
"""
Budget analytics.

Every function here is pure: callers load budgets and transactions and pass
an explicit ``today``. Nothing reads the clock or the database, so identical
inputs always produce identical snapshots.
"""
import calendar
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, List, Sequence, Tuple

from app.schemas.budget import (
    BudgetSnapshot,
    BudgetOverview,
    BudgetOverviewItem,
    BudgetTrend,
    BudgetTrendPoint,
)
from app.schemas.goal import GoalStatus, GoalInsights

STATUS_ON_TRACK = "OnTrack"
STATUS_WARNING = "Warning"
STATUS_EXCEEDED = "Exceeded"
STATUS_NOT_APPLICABLE = "N/A"

WARNING_THRESHOLD = 80.0
EXCEEDED_THRESHOLD = 100.0

MAX_TREND_MONTHS = 24
MAX_REALLOCATION_SHARE = 0.4

Period = Tuple[int, int]  # (year, month)


# ────────────────────────────────────────────────────────────────────────────────
# HELPERS – CALENDAR
# ────────────────────────────────────────────────────────────────────────────────
def _days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def shift_month(year: int, month: int, offset: int) -> Period:
    """Return (year, month) moved by ``offset`` months."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def period_bounds(year: int, month: int) -> Tuple[date, date]:
    return date(year, month, 1), date(year, month, _days_in_month(year, month))


def _as_date(value) -> date:
    return value.date() if isinstance(value, datetime) else value


def elapsed_days(year: int, month: int, today: date) -> int:
    """Days of the budget month that have passed, clamped to the month."""
    total = _days_in_month(year, month)
    if (today.year, today.month) < (year, month):
        return 0
    if (today.year, today.month) > (year, month):
        return total
    return today.day


# ────────────────────────────────────────────────────────────────────────────────
# HELPERS – SPENDING
# ────────────────────────────────────────────────────────────────────────────────
def category_expenses(transactions: Iterable, category_id) -> List:
    return [
        t for t in transactions
        if t.type == "expense" and t.category_id == category_id
    ]


def monthly_totals(expenses: Iterable) -> Dict[Period, float]:
    totals: Dict[Period, float] = defaultdict(float)
    for t in expenses:
        d = _as_date(t.transaction_date)
        totals[(d.year, d.month)] += float(t.amount)
    return dict(totals)


def usage_ratio(spent: float, amount: float) -> float:
    """Unrounded share of ``amount`` spent, in percent. Thresholds compare against this."""
    if amount <= 0:
        return 0.0
    return spent / amount * 100


def percentage_used(spent: float, amount: float) -> float:
    return round(usage_ratio(spent, amount), 2)


def classify(percentage: float, amount: float) -> str:
    """Status tier for a percentage; the 80/100 boundaries match the alert thresholds."""
    if amount <= 0:
        return STATUS_NOT_APPLICABLE
    if percentage >= EXCEEDED_THRESHOLD:
        return STATUS_EXCEEDED
    if percentage >= WARNING_THRESHOLD:
        return STATUS_WARNING
    return STATUS_ON_TRACK


def historical_average(totals: Dict[Period, float], year: int, month: int, months: int) -> float:
    """Mean monthly spend over the ``months`` before (year, month), skipping months with no spend."""
    values = []
    for offset in range(1, months + 1):
        key = shift_month(year, month, -offset)
        if totals.get(key, 0.0) > 0:
            values.append(totals[key])
    if not values:
        return 0.0
    return round(sum(values) / len(values), 2)


def suggest_budget(amount: float, projected_spend: float, history: float) -> float:
    if projected_spend > amount and projected_spend > 0:
        suggestion = projected_spend * 1.05
    elif history > amount:
        suggestion = history * 1.10
    elif history > 0 and amount > history * 1.3:
        suggestion = max(history * 1.15, amount * 0.9)
    else:
        suggestion = amount
    return round(max(0.0, suggestion), 2)


def build_recommendation(
    amount: float,
    spent: float,
    status: str,
    projected_variance: float,
    burn_rate_variance: float,
    history: float,
    suggested: float,
) -> str:
    if amount <= 0:
        return "Set a budget amount to start tracking this category."

    if status == STATUS_EXCEEDED:
        return (
            f"Budget exceeded by {spent - amount:.2f}. Hold off on new expenses in this "
            f"category or raise the budget to {suggested:.2f}."
        )

    overrun_margin = max(50.0, amount * 0.10)
    if projected_variance > overrun_margin:
        return (
            f"At the current pace spending will overrun the budget by {projected_variance:.2f}. "
            f"Slow down or plan for {suggested:.2f}."
        )

    if status == STATUS_WARNING:
        if burn_rate_variance > 0:
            return "Over 80% of the budget is used and daily spending is above plan. Limit new expenses."
        return "Over 80% of the budget is used. Keep an eye on the remaining amount."

    if history > 0 and amount < history:
        return (
            f"This budget is below your recent monthly average of {history:.2f}. "
            f"Consider adjusting it to {suggested:.2f}."
        )

    surplus_margin = max(20.0, amount * 0.05)
    if projected_variance < -surplus_margin:
        if suggested < amount:
            return (
                f"Spending is trending {abs(projected_variance):.2f} under budget. "
                f"You could lower it to {suggested:.2f} and move the difference elsewhere."
            )
        return f"Spending is trending {abs(projected_variance):.2f} under budget."

    return "Spending is on track for this budget."


# ────────────────────────────────────────────────────────────────────────────────
# MAIN ENTRY
# ────────────────────────────────────────────────────────────────────────────────
def compute_snapshot(budget, transactions: Iterable, today: date, history_months: int = 3) -> BudgetSnapshot:
    """
    Derive spending analytics for ``budget`` as of ``today``.

    ``transactions`` may hold anything; only expenses in the budget's
    category are considered. Expenses in the budget month count towards
    ``spent``, those in the ``history_months`` months before it feed the
    historical average. A non-positive amount yields percentage 0 and
    status "N/A" instead of raising.
    """
    amount = float(budget.amount or 0)
    year, month = budget.year, budget.month

    expenses = category_expenses(transactions, budget.category_id)
    in_period = [
        t for t in expenses
        if (_as_date(t.transaction_date).year, _as_date(t.transaction_date).month) == (year, month)
    ]
    spent = round(sum(float(t.amount) for t in in_period), 2)

    days_in_month = _days_in_month(year, month)
    days_elapsed = elapsed_days(year, month, today)
    days_remaining = days_in_month - days_elapsed

    pct = percentage_used(spent, amount)
    status = classify(usage_ratio(spent, amount), amount)

    daily_budget = amount / days_in_month if amount > 0 else 0.0
    burn_rate = spent / max(days_elapsed, 1)
    projected_spend = burn_rate * days_in_month
    burn_rate_variance = burn_rate - daily_budget
    projected_variance = projected_spend - amount

    history = historical_average(monthly_totals(expenses), year, month, history_months)
    suggested = suggest_budget(amount, projected_spend, history)

    last_date = max((_as_date(t.transaction_date) for t in in_period), default=None)

    return BudgetSnapshot(
        spent=spent,
        remaining=round(amount - spent, 2),
        percentage_used=pct,
        status=status,
        days_in_month=days_in_month,
        days_elapsed=days_elapsed,
        days_remaining=days_remaining,
        daily_budget=round(daily_budget, 2),
        burn_rate=round(burn_rate, 2),
        burn_rate_variance=round(burn_rate_variance, 2),
        projected_spend=round(projected_spend, 2),
        projected_variance=round(projected_variance, 2),
        historical_average=history,
        suggested_budget=suggested,
        budget_variance=round(suggested - amount, 2),
        transactions_count=len(in_period),
        last_transaction_date=last_date,
        recommendation=build_recommendation(
            amount, spent, status, projected_variance, burn_rate_variance, history, suggested
        ),
    )


# ────────────────────────────────────────────────────────────────────────────────
# OVERVIEW & TREND
# ────────────────────────────────────────────────────────────────────────────────
def potential_reallocation(amount: float, snapshot: BudgetSnapshot) -> float:
    """Share of a budget that could safely move to another category."""
    if amount <= 0 or snapshot.status in (STATUS_EXCEEDED, STATUS_WARNING):
        return 0.0
    remaining = max(amount - snapshot.spent, 0.0)
    projection_slack = max(amount - snapshot.projected_spend, 0.0)
    suggestion_slack = max(amount - snapshot.suggested_budget, 0.0)
    slack = min(remaining, max(projection_slack, suggestion_slack))
    return round(min(amount * MAX_REALLOCATION_SHARE, slack), 2)


def _is_at_risk(snapshot: BudgetSnapshot) -> bool:
    if snapshot.status == STATUS_NOT_APPLICABLE:
        return False
    return (
        snapshot.status in (STATUS_WARNING, STATUS_EXCEEDED)
        or snapshot.projected_variance > 0
        or snapshot.burn_rate_variance > 0
    )


def build_overview(entries: Sequence[Tuple[object, BudgetSnapshot]], month: int, year: int) -> BudgetOverview:
    """Aggregate per-budget snapshots for one month into an overview."""
    total_budget = sum(float(b.amount) for b, _ in entries)
    total_spent = sum(s.spent for _, s in entries)
    total_projected = sum(s.projected_spend for _, s in entries)

    at_risk: List[BudgetOverviewItem] = []
    comfortable: List[BudgetOverviewItem] = []
    for budget, snapshot in entries:
        item = BudgetOverviewItem(
            budget_id=budget.id,
            category_id=budget.category_id,
            category_name=getattr(budget, "category_name", None),
            amount=float(budget.amount),
            spent=snapshot.spent,
            percentage_used=snapshot.percentage_used,
            status=snapshot.status,
            projected_variance=snapshot.projected_variance,
            burn_rate_variance=snapshot.burn_rate_variance,
            suggested_budget=snapshot.suggested_budget,
            potential_reallocation=potential_reallocation(float(budget.amount), snapshot),
        )
        if _is_at_risk(snapshot):
            at_risk.append(item)
        elif snapshot.status == STATUS_ON_TRACK:
            comfortable.append(item)

    at_risk.sort(key=lambda i: i.projected_variance, reverse=True)
    comfortable.sort(key=lambda i: i.potential_reallocation, reverse=True)
    reallocation = round(sum(i.potential_reallocation for i in comfortable), 2)
    overall_pct = percentage_used(total_spent, total_budget)

    if not entries:
        recommendation = "No budgets set for this month. Create budgets to start tracking spending."
    elif at_risk and reallocation > 0:
        recommendation = (
            f"{len(at_risk)} categories are at risk. Up to {reallocation:.2f} could be moved "
            f"from categories that are comfortably under budget."
        )
    elif at_risk:
        names = ", ".join(i.category_name or str(i.category_id) for i in at_risk[:3])
        recommendation = f"{len(at_risk)} categories are at risk of overspending this month: {names}."
    elif usage_ratio(total_spent, total_budget) >= WARNING_THRESHOLD:
        recommendation = "Overall spending is close to the total budget for this month."
    else:
        recommendation = "All budgets are on track for this month."

    return BudgetOverview(
        month=month,
        year=year,
        total_budget=round(total_budget, 2),
        total_spent=round(total_spent, 2),
        total_remaining=round(total_budget - total_spent, 2),
        percentage_used=overall_pct,
        total_projected_spend=round(total_projected, 2),
        at_risk=at_risk,
        comfortable=comfortable,
        suggested_reallocation=reallocation,
        recommendation=recommendation,
    )


def trend_periods(today: date, months: int) -> List[Period]:
    """The last ``months`` periods up to and including today's, oldest first."""
    months = max(1, min(months, MAX_TREND_MONTHS))
    return [shift_month(today.year, today.month, -offset) for offset in range(months - 1, -1, -1)]


def build_trend(budgets: Iterable, transactions: Iterable, today: date, months: int = 6) -> BudgetTrend:
    """Planned vs spent per month, counting spend only in budgeted categories."""
    periods = trend_periods(today, months)
    planned: Dict[Period, float] = defaultdict(float)
    tracked: Dict[Period, set] = defaultdict(set)
    for b in budgets:
        key = (b.year, b.month)
        planned[key] += float(b.amount)
        tracked[key].add(b.category_id)

    spent: Dict[Period, float] = defaultdict(float)
    for t in transactions:
        if t.type != "expense":
            continue
        d = _as_date(t.transaction_date)
        key = (d.year, d.month)
        if t.category_id in tracked.get(key, ()):
            spent[key] += float(t.amount)

    points = []
    for year, month in periods:
        key = (year, month)
        p, s = planned.get(key, 0.0), spent.get(key, 0.0)
        points.append(BudgetTrendPoint(
            month=month,
            year=year,
            planned=round(p, 2),
            spent=round(s, 2),
            variance=round(s - p, 2),
            remaining=round(p - s, 2),
            coverage_percentage=percentage_used(s, p),
            categories_tracked=len(tracked.get(key, ())),
        ))
    return BudgetTrend(months=len(periods), points=points)


# ────────────────────────────────────────────────────────────────────────────────
# GOALS
# ────────────────────────────────────────────────────────────────────────────────
def goal_status(goal, transactions: Iterable) -> GoalStatus:
    """Spending in the goal's category and month measured against its target."""
    target = float(goal.target_amount or 0)
    current = round(sum(
        float(t.amount)
        for t in category_expenses(transactions, goal.category_id)
        if (_as_date(t.transaction_date).year, _as_date(t.transaction_date).month) == (goal.year, goal.month)
    ), 2)
    return GoalStatus(
        goal_id=goal.id,
        category_id=goal.category_id,
        category_name=getattr(goal, "category_name", None),
        target_amount=target,
        current_amount=current,
        remaining_amount=round(max(target - current, 0.0), 2),
        percentage=percentage_used(current, target),
        status=classify(usage_ratio(current, target), target),
        month=goal.month,
        year=goal.year,
    )


def build_goal_insights(
    statuses: Sequence[GoalStatus],
    today: date,
    risk_threshold: float = WARNING_THRESHOLD,
) -> GoalInsights:
    """Sort goals into completed, overdue (period over, target missed) and at-risk."""
    insights = GoalInsights(
        total_goals=len(statuses),
        total_target_amount=round(sum(s.target_amount for s in statuses), 2),
        total_current_amount=round(sum(s.current_amount for s in statuses), 2),
    )
    for s in statuses:
        _, period_end = period_bounds(s.year, s.month)
        if s.status == STATUS_EXCEEDED:
            insights.completed.append(s)
        elif period_end < today:
            insights.overdue.append(s)
        elif usage_ratio(s.current_amount, s.target_amount) >= risk_threshold:
            insights.at_risk.append(s)
    return insights
