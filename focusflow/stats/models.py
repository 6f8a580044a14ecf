"""Statistics data models."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Optional

from ..utils.clock import day_key, parse_day_key


def _non_negative_int(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


@dataclass
class DayStats:
    """Aggregates for one local calendar day."""
    focus_minutes: int = 0
    sessions: int = 0
    tasks_completed: int = 0

    def to_document(self) -> dict[str, int]:
        return {
            "focusMinutes": self.focus_minutes,
            "sessions": self.sessions,
            "tasksCompleted": self.tasks_completed,
        }

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "DayStats":
        return cls(
            focus_minutes=_non_negative_int(document.get("focusMinutes", 0)),
            sessions=_non_negative_int(document.get("sessions", 0)),
            tasks_completed=_non_negative_int(document.get("tasksCompleted", 0)),
        )


@dataclass
class Streak:
    """Consecutive days with at least one completed work session."""
    count: int = 0
    last_counted_date: Optional[date] = None

    def to_document(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "lastDate": day_key(self.last_counted_date) if self.last_counted_date else None,
        }

    @classmethod
    def from_document(cls, document: Optional[dict[str, Any]]) -> "Streak":
        if not document:
            return cls()
        last = document.get("lastDate")
        try:
            last_date = parse_day_key(last) if last else None
        except (TypeError, ValueError):
            last_date = None
        return cls(count=_non_negative_int(document.get("count", 0)), last_counted_date=last_date)


@dataclass(frozen=True)
class WeekDay:
    """One bar of the weekly focus chart."""
    day_label: str
    date: date
    focus_minutes: int

    def to_dict(self) -> dict[str, Any]:
        return {"day": self.day_label, "date": day_key(self.date), "minutes": self.focus_minutes}


@dataclass(frozen=True)
class Totals:
    """Lifetime totals over every stored day."""
    focus_minutes: int = 0
    sessions: int = 0
    tasks_completed: int = 0
    active_days: int = 0
