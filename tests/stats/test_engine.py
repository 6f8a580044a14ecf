"""Tests for the statistics and streak engine."""

import pytest
from datetime import date, timedelta

from focusflow.errors import ValidationError
from focusflow.stats.engine import StatisticsEngine, format_minutes
from focusflow.stats.models import DayStats, Streak

# Wednesday
TODAY = date(2024, 1, 10)


class TestRecordWorkSession:
    """Test crediting completed work sessions."""

    def test_first_session_of_the_day(self):
        engine = StatisticsEngine()

        stats = engine.record_work_session(25, TODAY)

        assert stats == DayStats(focus_minutes=25, sessions=1, tasks_completed=0)
        assert engine.stats_document() == {
            "2024-01-10": {"focusMinutes": 25, "sessions": 1, "tasksCompleted": 0}
        }

    def test_sessions_accumulate(self):
        engine = StatisticsEngine()

        engine.record_work_session(25, TODAY)
        engine.record_work_session(50, TODAY)

        assert engine.peek_day(TODAY).focus_minutes == 75
        assert engine.peek_day(TODAY).sessions == 2

    def test_days_are_kept_apart(self):
        engine = StatisticsEngine()

        engine.record_work_session(25, TODAY)
        engine.record_work_session(25, TODAY + timedelta(days=1))

        assert set(engine.days) == {"2024-01-10", "2024-01-11"}


class TestStreak:
    """Test consecutive-day streak counting."""

    def test_first_day_starts_streak(self):
        engine = StatisticsEngine()
        engine.record_work_session(25, TODAY)

        assert engine.streak_document() == {"count": 1, "lastDate": "2024-01-10"}

    def test_same_day_counts_once(self):
        engine = StatisticsEngine()

        for _ in range(5):
            engine.record_work_session(25, TODAY)

        assert engine.streak.count == 1

    def test_next_day_extends_streak(self):
        engine = StatisticsEngine(streak=Streak(count=3, last_counted_date=TODAY - timedelta(days=1)))

        engine.update_streak(TODAY)

        assert engine.streak == Streak(count=4, last_counted_date=TODAY)

    def test_missed_day_restarts_streak(self):
        engine = StatisticsEngine(streak=Streak(count=3, last_counted_date=TODAY - timedelta(days=2)))

        engine.update_streak(TODAY)

        assert engine.streak == Streak(count=1, last_counted_date=TODAY)

    def test_streak_across_month_boundary(self):
        engine = StatisticsEngine(streak=Streak(count=2, last_counted_date=date(2024, 1, 31)))

        engine.update_streak(date(2024, 2, 1))

        assert engine.streak.count == 3

    def test_week_of_sessions(self):
        engine = StatisticsEngine()
        for offset in range(7):
            engine.record_work_session(25, TODAY + timedelta(days=offset))

        assert engine.streak.count == 7

    def test_current_streak_display(self):
        engine = StatisticsEngine(streak=Streak(count=5, last_counted_date=TODAY))

        assert engine.current_streak(TODAY) == 5
        assert engine.current_streak(TODAY + timedelta(days=1)) == 5
        assert engine.current_streak(TODAY + timedelta(days=2)) == 0
        # Display never rewrites the stored streak
        assert engine.streak.count == 5

    def test_current_streak_empty(self):
        assert StatisticsEngine().current_streak(TODAY) == 0


class TestTaskCompletionDelta:
    """Test per-day completed-task counting."""

    def test_increment_and_decrement(self):
        engine = StatisticsEngine()

        engine.record_task_completion_delta(1, TODAY)
        engine.record_task_completion_delta(1, TODAY)
        engine.record_task_completion_delta(-1, TODAY)

        assert engine.peek_day(TODAY).tasks_completed == 1

    def test_never_below_zero(self):
        engine = StatisticsEngine()

        stats = engine.record_task_completion_delta(-1, TODAY)

        assert stats.tasks_completed == 0

    def test_does_not_touch_streak(self):
        engine = StatisticsEngine()
        engine.record_task_completion_delta(1, TODAY)

        assert engine.streak.count == 0

    @pytest.mark.parametrize("delta", [0, 2, -3])
    def test_rejects_other_deltas(self, delta):
        engine = StatisticsEngine()

        with pytest.raises(ValidationError):
            engine.record_task_completion_delta(delta, TODAY)

        assert engine.days == {}


class TestWeeklySeries:
    """Test the Monday-Sunday focus chart."""

    def test_week_containing_today(self):
        engine = StatisticsEngine()
        engine.record_work_session(25, date(2024, 1, 8))
        engine.record_work_session(50, TODAY)
        engine.record_work_session(30, date(2024, 1, 14))
        # Previous Sunday is outside the week
        engine.record_work_session(90, date(2024, 1, 7))

        series = engine.weekly_series(TODAY)

        assert [d.day_label for d in series] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert [d.focus_minutes for d in series] == [25, 0, 50, 0, 0, 0, 30]
        assert series[0].date == date(2024, 1, 8)
        assert series[6].to_dict() == {"day": "Sun", "date": "2024-01-14", "minutes": 30}

    def test_sunday_belongs_to_preceding_monday(self):
        series = StatisticsEngine().weekly_series(date(2024, 1, 14))
        assert series[0].date == date(2024, 1, 8)

    def test_series_does_not_create_entries(self):
        engine = StatisticsEngine()
        engine.weekly_series(TODAY)
        assert engine.days == {}


class TestDocuments:
    """Test loading persisted documents."""

    def test_round_trip_through_documents(self):
        engine = StatisticsEngine()
        engine.record_work_session(25, TODAY)
        engine.record_task_completion_delta(1, TODAY)

        restored = StatisticsEngine.from_documents(engine.stats_document(), engine.streak_document())

        assert restored.peek_day(TODAY) == engine.peek_day(TODAY)
        assert restored.streak == engine.streak

    def test_malformed_entries_are_skipped(self):
        engine = StatisticsEngine.from_documents(
            {"2024-01-10": {"focusMinutes": "oops", "sessions": 2}, "2024-01-09": 5},
            {"count": 2, "lastDate": "not-a-date"}
        )

        assert set(engine.days) == {"2024-01-10"}
        assert engine.peek_day(TODAY) == DayStats(focus_minutes=0, sessions=2)
        assert engine.streak == Streak(count=2, last_counted_date=None)

    def test_empty_documents(self):
        engine = StatisticsEngine.from_documents(None, None)
        assert engine.days == {}
        assert engine.streak == Streak()


class TestTotals:
    """Test lifetime totals and formatting."""

    def test_totals(self):
        engine = StatisticsEngine()
        engine.record_work_session(25, TODAY)
        engine.record_work_session(25, TODAY)
        engine.record_work_session(40, TODAY + timedelta(days=1))
        engine.record_task_completion_delta(1, TODAY + timedelta(days=2))

        totals = engine.totals()

        assert totals.focus_minutes == 90
        assert totals.sessions == 3
        assert totals.tasks_completed == 1
        assert totals.active_days == 2

    @pytest.mark.parametrize("minutes,expected", [
        (0, "0m"),
        (45, "45m"),
        (60, "1h 0m"),
        (125, "2h 5m"),
    ])
    def test_format_minutes(self, minutes, expected):
        assert format_minutes(minutes) == expected
