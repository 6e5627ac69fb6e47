"""
Tests for the recurrence rules in app.utils.recurrence.
"""
from datetime import date

from app.models.recurring_transaction import RecurringTransaction
from app.utils.recurrence import is_due, matches_pattern, next_occurrence, pending_occurrences


def make_definition(**fields) -> RecurringTransaction:
    values = dict(
        type="expense",
        amount=50.0,
        description="Gym membership",
        frequency="monthly",
        start_date=date(2024, 1, 15),
        day_of_month=15,
        is_active=True,
        last_generated_date=None,
        end_date=None,
    )
    values.update(fields)
    return RecurringTransaction(**values)


class TestMatchesPattern:
    """Test suite for frequency matching."""

    def test_day_31_falls_on_last_day_of_short_months(self):
        definition = make_definition(start_date=date(2023, 1, 31), day_of_month=31)

        assert matches_pattern(definition, date(2023, 2, 28))
        assert matches_pattern(definition, date(2024, 2, 29))
        assert matches_pattern(definition, date(2023, 4, 30))
        assert not matches_pattern(definition, date(2023, 3, 30))

    def test_weekly_uses_monday_as_zero(self):
        definition = make_definition(frequency="weekly", day_of_month=None, day_of_week=0)

        assert matches_pattern(definition, date(2024, 4, 1))  # Monday
        assert not matches_pattern(definition, date(2024, 4, 2))

    def test_yearly_leap_day_anniversary(self):
        """Test that a Feb 29 start recurs on Feb 28 in common years."""
        definition = make_definition(frequency="yearly", day_of_month=None, start_date=date(2024, 2, 29))

        assert matches_pattern(definition, date(2025, 2, 28))
        assert not matches_pattern(definition, date(2025, 3, 1))
        assert matches_pattern(definition, date(2028, 2, 29))
        assert not matches_pattern(definition, date(2028, 2, 28))

    def test_is_due_respects_bounds_and_active_flag(self):
        definition = make_definition(end_date=date(2024, 3, 31))

        assert is_due(definition, date(2024, 2, 15))
        assert not is_due(definition, date(2024, 1, 14))
        assert not is_due(definition, date(2024, 4, 15))
        definition.is_active = False
        assert not is_due(definition, date(2024, 2, 15))


class TestPendingOccurrences:
    """Test suite for catch-up of missed occurrences."""

    def test_monthly_catch_up_from_start(self):
        """Test that every missed month is produced, oldest first."""
        definition = make_definition()

        assert pending_occurrences(definition, date(2024, 4, 15)) == [
            date(2024, 1, 15),
            date(2024, 2, 15),
            date(2024, 3, 15),
            date(2024, 4, 15),
        ]

    def test_month_end_catch_up(self):
        definition = make_definition(start_date=date(2023, 1, 1), day_of_month=31)

        assert pending_occurrences(definition, date(2023, 3, 31)) == [
            date(2023, 1, 31),
            date(2023, 2, 28),
            date(2023, 3, 31),
        ]

    def test_resumes_after_watermark(self):
        definition = make_definition(
            frequency="daily",
            day_of_month=None,
            start_date=date(2024, 4, 1),
            last_generated_date=date(2024, 4, 12),
        )

        assert pending_occurrences(definition, date(2024, 4, 15)) == [
            date(2024, 4, 13),
            date(2024, 4, 14),
            date(2024, 4, 15),
        ]

    def test_weekly_occurrences(self):
        definition = make_definition(
            frequency="weekly",
            day_of_month=None,
            day_of_week=0,
            start_date=date(2024, 4, 1),
        )

        assert pending_occurrences(definition, date(2024, 4, 15)) == [
            date(2024, 4, 1),
            date(2024, 4, 8),
            date(2024, 4, 15),
        ]

    def test_up_to_end_date_on_the_end_date(self):
        definition = make_definition(start_date=date(2024, 1, 1), day_of_month=1, end_date=date(2024, 2, 1))

        assert pending_occurrences(definition, date(2024, 2, 1)) == [date(2024, 1, 1), date(2024, 2, 1)]

    def test_finished_definition_does_not_backfill(self):
        """Test that once today is past end_date, missed dates are not produced either."""
        definition = make_definition(start_date=date(2024, 1, 1), day_of_month=1, end_date=date(2024, 2, 1))

        assert pending_occurrences(definition, date(2024, 3, 1)) == []
        assert next_occurrence(definition, date(2024, 3, 1)) is None

    def test_nothing_pending_once_caught_up_to_end_date(self):
        definition = make_definition(
            start_date=date(2024, 1, 1),
            day_of_month=1,
            end_date=date(2024, 2, 1),
            last_generated_date=date(2024, 2, 1),
        )

        assert pending_occurrences(definition, date(2024, 3, 1)) == []

    def test_inactive_definition_has_nothing_pending(self):
        assert pending_occurrences(make_definition(is_active=False), date(2024, 4, 15)) == []

    def test_future_start_has_nothing_pending(self):
        assert pending_occurrences(make_definition(start_date=date(2024, 5, 15)), date(2024, 4, 15)) == []


class TestNextOccurrence:
    """Test suite for the next generation date shown to clients."""

    def test_caught_up_points_to_next_month(self):
        definition = make_definition(last_generated_date=date(2024, 4, 15))
        assert next_occurrence(definition, date(2024, 4, 20)) == date(2024, 5, 15)

    def test_caught_up_on_occurrence_day(self):
        definition = make_definition(last_generated_date=date(2024, 4, 15))
        assert next_occurrence(definition, date(2024, 4, 15)) == date(2024, 5, 15)

    def test_behind_points_to_oldest_missed(self):
        definition = make_definition(last_generated_date=date(2024, 2, 15))
        assert next_occurrence(definition, date(2024, 4, 15)) == date(2024, 3, 15)

    def test_future_start(self):
        definition = make_definition(start_date=date(2024, 6, 10), day_of_month=10)
        assert next_occurrence(definition, date(2024, 4, 15)) == date(2024, 6, 10)

    def test_finished_or_paused_has_none(self):
        finished = make_definition(end_date=date(2024, 3, 1), last_generated_date=date(2024, 2, 15))
        assert next_occurrence(finished, date(2024, 4, 15)) is None
        assert next_occurrence(make_definition(is_active=False), date(2024, 4, 15)) is None
