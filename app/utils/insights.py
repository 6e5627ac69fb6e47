# app/utils/insights.py
"""
Financial insights.

Four detectors look at a user's recent activity: a category spending well
above its usual level, an overall burn rate heading past the usual month,
budgets used faster than the month is passing, and income moving away from
its recent average. Like ``budgeting.py`` everything here is pure; the route
loads the rows and passes ``now`` in.
"""
import calendar
from collections import defaultdict
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from app.schemas.budget import BudgetSnapshot
from app.schemas.insight import FinancialInsight, InsightDataPoint
from app.utils.budgeting import monthly_totals, shift_month

DEFAULT_LOOKBACK_MONTHS = 3
HISTORY_MONTHS = 6
MIN_HISTORY_MONTHS = 2

SEVERITY_RANK = {"low": 0, "medium": 1, "high": 2, "critical": 3}


def insight_periods(
    today: date,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Tuple[date, date, date]:
    """
    Return (history_start, current_start, end) for a request.

    The current period is the month of ``end`` (never earlier than
    ``start_date``); history reaches six months before ``start_date``.
    """
    end = end_date or today
    if start_date is None:
        year, month = shift_month(end.year, end.month, -DEFAULT_LOOKBACK_MONTHS)
        start_date = date(year, month, 1)
    current_start = max(date(end.year, end.month, 1), start_date)

    year, month = shift_month(start_date.year, start_date.month, -HISTORY_MONTHS)
    history_start = date(year, month, min(start_date.day, calendar.monthrange(year, month)[1]))
    return history_start, current_start, end


def _split(transactions: Iterable, type: str, current_start: date, end: date) -> Tuple[List, List]:
    current, history = [], []
    for t in transactions:
        if t.type != type:
            continue
        d = t.transaction_date
        if current_start <= d <= end:
            current.append(t)
        elif d < current_start:
            history.append(t)
    return current, history


def _history_average(history: Iterable) -> Tuple[float, int]:
    """Mean of the monthly totals and the number of months observed."""
    totals = monthly_totals(history)
    if not totals:
        return 0.0, 0
    return sum(totals.values()) / len(totals), len(totals)


# ────────────────────────────────────────────────────────────────────────────────
# DETECTORS
# ────────────────────────────────────────────────────────────────────────────────
def detect_category_overspend(
    transactions: Iterable, current_start: date, end: date, now: datetime
) -> List[FinancialInsight]:
    current, history = _split(transactions, "expense", current_start, end)

    totals: Dict = defaultdict(float)
    names: Dict = {}
    for t in current:
        totals[t.category_id] += float(t.amount)
        names[t.category_id] = t.category_name or "Uncategorized"

    history_by_category: Dict = defaultdict(list)
    for t in history:
        history_by_category[t.category_id].append(t)

    insights = []
    for category_id, total in totals.items():
        average, observed = _history_average(history_by_category.get(category_id, []))
        if observed < MIN_HISTORY_MONTHS or average <= 0:
            continue

        delta = total - average
        ratio = total / average
        if ratio < 1.2 or delta < 50:
            continue

        if ratio >= 2.0:
            severity = "critical"
            recommendation = "Review this category now. Set a tighter limit or cut non-essential spending."
        elif ratio >= 1.6:
            severity = "high"
            recommendation = "Check which expenses were one-offs and spread that cost over the coming months."
        elif ratio >= 1.3:
            severity = "medium"
            recommendation = "Watch the next expenses and consider adjusting the budget."
        else:
            severity = "low"
            recommendation = "Keep an eye on this category and hold new spending until the month ends."

        name = names[category_id]
        insights.append(FinancialInsight(
            category="spending_pattern",
            severity=severity,
            title=f"High spending in {name}",
            summary=f"Spending in {name} is at {ratio:.0%} of its recent monthly average.",
            recommendation=recommendation,
            impact_amount=round(delta, 2),
            benchmark_amount=round(average, 2),
            generated_at=now,
            data_points=[InsightDataPoint(label="Current period", value=round(total, 2), benchmark=round(average, 2))],
        ))
    return insights


def detect_burn_rate(
    transactions: Iterable, current_start: date, end: date, now: datetime
) -> List[FinancialInsight]:
    current, history = _split(transactions, "expense", current_start, end)
    if not current:
        return []

    average, observed = _history_average(history)
    if observed < MIN_HISTORY_MONTHS or average <= 0:
        return []

    days_elapsed = max(1, (end - current_start).days + 1)
    days_in_month = calendar.monthrange(current_start.year, current_start.month)[1]
    projected = sum(float(t.amount) for t in current) / days_elapsed * days_in_month
    if projected <= average * 1.25:
        return []

    if projected >= average * 1.8:
        severity = "critical"
        recommendation = "Cut spending now and freeze discretionary expenses until next month."
    elif projected >= average * 1.5:
        severity = "high"
        recommendation = "Focus on essential categories and postpone lower-priority purchases."
    else:
        severity = "medium"
        recommendation = "Watch the rest of the month and stay close to the planned budget."

    return [FinancialInsight(
        category="spending_pattern",
        severity=severity,
        title="Spending pace above normal",
        summary="At the current pace this month will close well above your usual monthly spending.",
        recommendation=recommendation,
        impact_amount=round(projected - average, 2),
        benchmark_amount=round(average, 2),
        generated_at=now,
        data_points=[
            InsightDataPoint(label="Projected spend", value=round(projected, 2), benchmark=round(average, 2)),
            InsightDataPoint(label="Days elapsed", value=days_elapsed),
        ],
    )]


def detect_budget_risks(
    entries: Sequence[Tuple[object, BudgetSnapshot]], now: datetime
) -> List[FinancialInsight]:
    """Budgets whose usage runs ahead of the share of the month already passed."""
    insights = []
    for budget, snapshot in entries:
        amount = float(budget.amount or 0)
        if snapshot.spent <= 0 or amount <= 0:
            continue

        progress = snapshot.days_elapsed / snapshot.days_in_month
        usage = snapshot.spent / amount
        expected = amount * progress
        delta = max(snapshot.spent - expected, 0.0)
        if delta < amount * 0.1 and usage < progress + 0.15:
            continue

        if usage >= 1.0:
            severity = "critical"
            recommendation = "This budget is exceeded. Move the excess from another category or cut spending now."
        elif usage >= 0.85:
            severity = "high"
            recommendation = "Reduce spending in this category to stay within budget until the month ends."
        elif usage >= 0.7:
            severity = "medium"
            recommendation = "Adjust the next expenses or revise the planned amount for this category."
        else:
            severity = "low"
            recommendation = "Keep an eye on this category to keep the budget balanced."

        name = getattr(budget, "category_name", None) or "Budget"
        insights.append(FinancialInsight(
            category="budget_risk",
            severity=severity,
            title=f"{name} budget at risk",
            summary=f"{usage:.0%} of the budget is used with {progress:.0%} of the month gone.",
            recommendation=recommendation,
            impact_amount=round(delta, 2),
            benchmark_amount=round(expected, 2),
            generated_at=now,
            data_points=[
                InsightDataPoint(label="Spent", value=round(snapshot.spent, 2), benchmark=round(amount, 2)),
                InsightDataPoint(label="Expected progress", value=round(progress * 100, 1)),
            ],
        ))
    return insights


def detect_income_change(
    transactions: Iterable, current_start: date, end: date, now: datetime
) -> List[FinancialInsight]:
    current, history = _split(transactions, "income", current_start, end)
    income = sum(float(t.amount) for t in current)
    if income <= 0:
        return []

    average, observed = _history_average(history)
    if observed < MIN_HISTORY_MONTHS or average <= 0:
        return []

    ratio = income / average
    if 0.85 <= ratio <= 1.15:
        return []

    decrease = ratio < 1
    if decrease:
        severity = "high" if ratio <= 0.6 else "medium" if ratio <= 0.75 else "low"
        title = "Income drop detected"
        summary = f"Income this period is at {ratio:.0%} of the recent average."
        recommendation = "Set aside an extra reserve and trim discretionary spending until income recovers."
    else:
        severity = "medium" if ratio >= 1.5 else "low"
        title = "Income above expectations"
        summary = f"Income this period is {ratio - 1:.0%} above the recent average."
        recommendation = "Consider moving the surplus to savings or paying planned expenses early."

    return [FinancialInsight(
        category="income_pattern",
        severity=severity,
        title=title,
        summary=summary,
        recommendation=recommendation,
        impact_amount=round(abs(income - average), 2),
        benchmark_amount=round(average, 2),
        generated_at=now,
        data_points=[InsightDataPoint(label="Current income", value=round(income, 2), benchmark=round(average, 2))],
    )]


# ────────────────────────────────────────────────────────────────────────────────
# MAIN ENTRY
# ────────────────────────────────────────────────────────────────────────────────
def generate_insights(
    transactions: Sequence,
    budget_entries: Sequence[Tuple[object, BudgetSnapshot]],
    current_start: date,
    end: date,
    now: datetime,
    category_id=None,
    include_income: bool = True,
    include_expense: bool = True,
) -> List[FinancialInsight]:
    """All insights for the period, most severe and most costly first."""
    if category_id is not None:
        transactions = [t for t in transactions if t.category_id == category_id]
        budget_entries = [(b, s) for b, s in budget_entries if b.category_id == category_id]

    insights: List[FinancialInsight] = []
    if include_expense:
        insights += detect_category_overspend(transactions, current_start, end, now)
        insights += detect_burn_rate(transactions, current_start, end, now)
        insights += detect_budget_risks(budget_entries, now)
    if include_income:
        insights += detect_income_change(transactions, current_start, end, now)

    insights.sort(key=lambda i: (SEVERITY_RANK[i.severity], i.impact_amount or 0.0), reverse=True)
    return insights
