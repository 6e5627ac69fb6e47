# app/utils/reports.py
import csv
import io
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, Iterable, List, Sequence, Tuple

from app.schemas.report import (
    ReportSummary,
    CategoryReport,
    CategoryReportItem,
    MonthlyReport,
    MonthlyReportItem,
)


def _totals(transactions: Iterable) -> Tuple[float, float, int]:
    income = expenses = 0.0
    count = 0
    for t in transactions:
        count += 1
        if t.type == "income":
            income += float(t.amount)
        else:
            expenses += float(t.amount)
    return income, expenses, count


def _change(current: float, previous: float) -> float:
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return round((current - previous) / previous * 100, 2)


def previous_period(start_date: date, end_date: date) -> Tuple[date, date]:
    """The period of equal length that ends the day before ``start_date``."""
    length = (end_date - start_date).days + 1
    prev_end = start_date - timedelta(days=1)
    return prev_end - timedelta(days=length - 1), prev_end


def build_summary(
    transactions: Sequence,
    previous: Sequence,
    start_date: date,
    end_date: date,
) -> ReportSummary:
    income, expenses, count = _totals(transactions)
    prev_income, prev_expenses, _ = _totals(previous)
    days = (end_date - start_date).days + 1
    balance = income - expenses
    return ReportSummary(
        start_date=start_date,
        end_date=end_date,
        total_income=round(income, 2),
        total_expenses=round(expenses, 2),
        balance=round(balance, 2),
        transactions_count=count,
        income_change_percentage=_change(income, prev_income),
        expense_change_percentage=_change(expenses, prev_expenses),
        average_daily_expense=round(expenses / days, 2) if days > 0 else 0.0,
        savings_rate=round(balance / income * 100, 2) if income > 0 else 0.0,
    )


def build_category_report(transactions: Iterable, type: str, start_date: date, end_date: date) -> CategoryReport:
    totals: Dict = defaultdict(float)
    counts: Dict = defaultdict(int)
    names: Dict = {}
    for t in transactions:
        if t.type != type:
            continue
        totals[t.category_id] += float(t.amount)
        counts[t.category_id] += 1
        names[t.category_id] = t.category_name or "Uncategorized"

    grand_total = sum(totals.values())
    items = [
        CategoryReportItem(
            category_id=category_id,
            category_name=names[category_id],
            total=round(total, 2),
            transactions_count=counts[category_id],
            percentage=round(total / grand_total * 100, 2) if grand_total > 0 else 0.0,
        )
        for category_id, total in totals.items()
    ]
    items.sort(key=lambda i: i.total, reverse=True)
    return CategoryReport(
        start_date=start_date,
        end_date=end_date,
        type=type,
        total=round(grand_total, 2),
        categories=items,
    )


def build_monthly_report(transactions: Iterable, year: int) -> MonthlyReport:
    income: Dict[int, float] = defaultdict(float)
    expenses: Dict[int, float] = defaultdict(float)
    for t in transactions:
        if t.transaction_date.year != year:
            continue
        bucket = income if t.type == "income" else expenses
        bucket[t.transaction_date.month] += float(t.amount)

    months = [
        MonthlyReportItem(
            month=m,
            year=year,
            income=round(income[m], 2),
            expenses=round(expenses[m], 2),
            balance=round(income[m] - expenses[m], 2),
        )
        for m in range(1, 13)
    ]
    active = [m for m in months if m.income or m.expenses]
    best = max(active, key=lambda m: m.balance).month if active else None
    return MonthlyReport(
        year=year,
        months=months,
        total_income=round(sum(income.values()), 2),
        total_expenses=round(sum(expenses.values()), 2),
        best_month=best,
    )


# ────────────────────────────────────────────────────────────────────────────────
# CSV EXPORT
# ────────────────────────────────────────────────────────────────────────────────
TRANSACTION_COLUMNS = ["date", "type", "category", "description", "amount", "recurring"]
BUDGET_COLUMNS = [
    "year", "month", "category", "amount", "spent", "remaining",
    "percentage_used", "status", "projected_spend", "suggested_budget",
]


def transactions_to_csv(transactions: Iterable) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(TRANSACTION_COLUMNS)
    for t in transactions:
        writer.writerow([
            t.transaction_date.isoformat(),
            t.type,
            t.category_name or "",
            t.description,
            f"{float(t.amount):.2f}",
            "yes" if t.recurring_transaction_id else "no",
        ])
    return buffer.getvalue()


def budgets_to_csv(entries: List[Tuple]) -> str:
    """``entries`` are (budget, snapshot) pairs."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(BUDGET_COLUMNS)
    for budget, snapshot in entries:
        writer.writerow([
            budget.year,
            budget.month,
            budget.category_name or "",
            f"{float(budget.amount):.2f}",
            f"{snapshot.spent:.2f}",
            f"{snapshot.remaining:.2f}",
            f"{snapshot.percentage_used:.2f}",
            snapshot.status,
            f"{snapshot.projected_spend:.2f}",
            f"{snapshot.suggested_budget:.2f}",
        ])
    return buffer.getvalue()
