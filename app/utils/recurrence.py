# app/utils/recurrence.py
"""
Occurrence rules for recurring transactions.

Works on anything exposing the RecurringTransaction schedule fields so the
scheduler, API responses and tests share one definition of "due".
"""
import calendar
from datetime import date, timedelta
from typing import Iterator, List, Optional

# Upper bound on the look-ahead of next_occurrence; a yearly Feb 29 rule
# still matches within this window.
_MAX_LOOKAHEAD_DAYS = 366 * 4 + 1


def _clamped_day(year: int, month: int, day: int) -> int:
    return min(day, calendar.monthrange(year, month)[1])


def matches_pattern(definition, d: date) -> bool:
    """Whether ``d`` falls on the definition's frequency pattern, ignoring bounds."""
    frequency = definition.frequency
    if frequency == "daily":
        return True
    if frequency == "weekly":
        return definition.day_of_week is not None and d.weekday() == definition.day_of_week
    if frequency == "monthly":
        if definition.day_of_month is None:
            return False
        return d.day == _clamped_day(d.year, d.month, definition.day_of_month)
    if frequency == "yearly":
        start = definition.start_date
        # Feb 29 anniversaries fall on Feb 28 in non-leap years
        return d.month == start.month and d.day == _clamped_day(d.year, start.month, start.day)
    return False


def is_due(definition, d: date) -> bool:
    if not definition.is_active:
        return False
    if d < definition.start_date:
        return False
    if definition.end_date is not None and d > definition.end_date:
        return False
    return matches_pattern(definition, d)


def _finished(definition, today: date) -> bool:
    return definition.end_date is not None and today > definition.end_date


def _days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def pending_occurrences(definition, today: date) -> List[date]:
    """
    Due dates not yet materialized, oldest first.

    Scans from the day after ``last_generated_date`` (or ``start_date`` when
    nothing was generated) through ``today``. Once ``today`` is past
    ``end_date`` the definition is finished and nothing is pending, even
    dates it missed before the end.
    """
    if not definition.is_active or _finished(definition, today):
        return []

    start = definition.start_date
    if definition.last_generated_date is not None:
        start = max(start, definition.last_generated_date + timedelta(days=1))

    return [d for d in _days(start, today) if matches_pattern(definition, d)]


def next_occurrence(definition, today: date) -> Optional[date]:
    """
    Next date the scheduler will generate.

    This is the oldest pending occurrence when the definition is behind,
    otherwise the first due date after ``today``.
    """
    if not definition.is_active or _finished(definition, today):
        return None

    start = definition.start_date
    if definition.last_generated_date is not None:
        start = max(start, definition.last_generated_date + timedelta(days=1))
    if start <= today and not pending_occurrences(definition, today):
        start = today + timedelta(days=1)

    end = start + timedelta(days=_MAX_LOOKAHEAD_DAYS)
    if definition.end_date is not None:
        end = min(end, definition.end_date)

    for d in _days(start, end):
        if matches_pattern(definition, d):
            return d
    return None
