"""
Statistics and streak engine.

Consumes completed work sessions and task completion toggles, and keeps
per-day aggregates keyed by local calendar date plus the consecutive-day
streak. All date arithmetic is calendar-day based.
"""

from datetime import date, timedelta
from typing import Any, Optional

import structlog

from ..errors import ValidationError
from ..utils.clock import day_key, previous_day, week_start
from .models import DayStats, Streak, Totals, WeekDay

logger = structlog.get_logger(__name__)

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


class StatisticsEngine:
    """Maintains per-day statistics and the streak."""

    def __init__(self, days: Optional[dict[str, DayStats]] = None, streak: Optional[Streak] = None):
        self.logger = logger
        self.days: dict[str, DayStats] = days if days is not None else {}
        self.streak = streak or Streak()

    @classmethod
    def from_documents(
        cls,
        stats_document: Optional[dict[str, Any]],
        streak_document: Optional[dict[str, Any]]
    ) -> "StatisticsEngine":
        """Build from persisted documents, skipping malformed day entries."""
        days = {}
        for key, value in (stats_document or {}).items():
            if isinstance(value, dict):
                days[key] = DayStats.from_document(value)
            else:
                logger.warning("Skipping malformed day stats", day=key)
        return cls(days=days, streak=Streak.from_document(streak_document))

    def stats_document(self) -> dict[str, dict[str, int]]:
        return {key: stats.to_document() for key, stats in self.days.items()}

    def streak_document(self) -> dict[str, Any]:
        return self.streak.to_document()

    def today_stats(self, today: date) -> DayStats:
        """Get or lazily create the stats entry for ``today``."""
        key = day_key(today)
        if key not in self.days:
            self.days[key] = DayStats()
        return self.days[key]

    def peek_day(self, day: date) -> DayStats:
        """Stats for ``day`` without creating an entry."""
        return self.days.get(day_key(day)) or DayStats()

    def record_work_session(self, work_minutes: int, today: date) -> DayStats:
        """Credit one completed work session to ``today`` and update the streak."""
        stats = self.today_stats(today)
        stats.focus_minutes += work_minutes
        stats.sessions += 1
        self.update_streak(today)

        self.logger.info(
            "Recorded work session",
            day=day_key(today),
            work_minutes=work_minutes,
            focus_minutes=stats.focus_minutes,
            sessions=stats.sessions,
            streak=self.streak.count
        )
        return stats

    def update_streak(self, today: date) -> Streak:
        """Count ``today`` towards the streak at most once."""
        if self.streak.last_counted_date == today:
            return self.streak

        if self.streak.last_counted_date == previous_day(today):
            self.streak.count += 1
        else:
            self.streak.count = 1
        self.streak.last_counted_date = today
        return self.streak

    def record_task_completion_delta(self, delta: int, today: date) -> DayStats:
        """Adjust today's completed-task count by +1 or -1, never below zero."""
        if delta not in (1, -1):
            raise ValidationError(
                f"Task completion delta must be +1 or -1, got {delta}",
                field="delta",
                value=delta
            )

        stats = self.today_stats(today)
        stats.tasks_completed = max(0, stats.tasks_completed + delta)
        return stats

    def weekly_series(self, today: date) -> list[WeekDay]:
        """Focus minutes for each day of the Monday-Sunday week containing ``today``."""
        monday = week_start(today)
        series = []
        for offset, label in enumerate(WEEKDAY_LABELS):
            day = monday + timedelta(days=offset)
            series.append(WeekDay(
                day_label=label,
                date=day,
                focus_minutes=self.peek_day(day).focus_minutes
            ))
        return series

    def current_streak(self, today: date) -> int:
        """Streak as it should be displayed: zero once a full day has been missed."""
        last = self.streak.last_counted_date
        if last is not None and last in (today, previous_day(today)):
            return self.streak.count
        return 0

    def totals(self) -> Totals:
        """Lifetime totals over all stored days."""
        return Totals(
            focus_minutes=sum(s.focus_minutes for s in self.days.values()),
            sessions=sum(s.sessions for s in self.days.values()),
            tasks_completed=sum(s.tasks_completed for s in self.days.values()),
            active_days=sum(1 for s in self.days.values() if s.sessions > 0),
        )


def format_minutes(minutes: int) -> str:
    """Human-readable focus time: ``1h 5m`` or ``45m``."""
    hours, mins = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"
