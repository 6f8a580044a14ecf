"""
State machine data models for the focus timer.

This module defines immutable data structures for the timer state, the
effects produced by transitions, and the transition result itself.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from ..config.defaults import Settings


class TimerMode(str, Enum):
    """Phase kinds of the work/break cycle."""
    WORK = "work"
    SHORT_BREAK = "shortBreak"
    LONG_BREAK = "longBreak"

    @property
    def is_break(self) -> bool:
        return self is not TimerMode.WORK


class TimerStatus(str, Enum):
    """Coarse timer status derived from the running/paused flags."""
    READY = "ready"
    RUNNING = "running"
    PAUSED = "paused"


MODE_LABELS = {
    TimerMode.WORK: "Focusing",
    TimerMode.SHORT_BREAK: "Short break",
    TimerMode.LONG_BREAK: "Long break",
}


def mode_duration_minutes(mode: TimerMode, settings: Settings) -> int:
    """Configured duration of ``mode`` in minutes."""
    if mode == TimerMode.SHORT_BREAK:
        return settings.short_break_minutes
    if mode == TimerMode.LONG_BREAK:
        return settings.long_break_minutes
    return settings.work_minutes


@dataclass(frozen=True)
class TimerState:
    """Runtime state of the focus timer."""

    mode: TimerMode = TimerMode.WORK
    running: bool = False
    paused: bool = False
    remaining_seconds: int = 25 * 60
    total_seconds: int = 25 * 60
    current_session: int = 1                 # 1..sessions_before_long, 0 during a long break

    @classmethod
    def initial(cls, settings: Settings) -> "TimerState":
        """Ready state in Work mode for a fresh start."""
        return cls().with_mode(TimerMode.WORK, settings)

    @property
    def status(self) -> TimerStatus:
        if self.paused:
            return TimerStatus.PAUSED
        if self.running:
            return TimerStatus.RUNNING
        return TimerStatus.READY

    @property
    def ticking(self) -> bool:
        """True while the tick driver should be delivering ticks."""
        return self.running and not self.paused

    @property
    def label(self) -> str:
        if self.paused:
            return "Paused"
        if not self.running:
            return "Ready to focus"
        return MODE_LABELS[self.mode]

    @property
    def progress(self) -> float:
        """Fraction of the phase already elapsed, 0.0 to 1.0."""
        if self.total_seconds <= 0:
            return 0.0
        return 1 - (self.remaining_seconds / self.total_seconds)

    @property
    def display_time(self) -> str:
        minutes, seconds = divmod(self.remaining_seconds, 60)
        return f"{minutes:02d}:{seconds:02d}"

    def with_mode(self, mode: TimerMode, settings: Settings) -> "TimerState":
        """Switch mode and reload the full duration for it."""
        total = mode_duration_minutes(mode, settings) * 60
        return replace(self, mode=mode, remaining_seconds=total, total_seconds=total)

    def with_full_duration(self, settings: Settings) -> "TimerState":
        """Reload the full duration of the current mode."""
        return self.with_mode(self.mode, settings)

    def stopped(self) -> "TimerState":
        return replace(self, running=False, paused=False)

    def started(self) -> "TimerState":
        return replace(self, running=True, paused=False)

    def paused_state(self) -> "TimerState":
        return replace(self, paused=True)

    def with_remaining(self, remaining_seconds: int) -> "TimerState":
        return replace(self, remaining_seconds=max(0, min(remaining_seconds, self.total_seconds)))

    def with_session(self, current_session: int) -> "TimerState":
        return replace(self, current_session=current_session)

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "status": self.status.value,
            "running": self.running,
            "paused": self.paused,
            "remainingSeconds": self.remaining_seconds,
            "totalSeconds": self.total_seconds,
            "currentSession": self.current_session,
            "label": self.label,
            "displayTime": self.display_time,
        }


@dataclass(frozen=True)
class PlayChime:
    """Play the completion chime."""


@dataclass(frozen=True)
class Notify:
    """Deliver a desktop notification."""
    title: str
    body: str


@dataclass(frozen=True)
class WorkSessionCompleted:
    """A work phase finished and should be credited to stats and the active task."""
    minutes: int
    completed_at: datetime


@dataclass(frozen=True)
class ScheduleAutoStart:
    """Start the next phase after a short delay."""
    mode: TimerMode


Effect = Union[PlayChime, Notify, WorkSessionCompleted, ScheduleAutoStart]


class TransitionTrigger(str, Enum):
    """What caused a transition."""
    START = "start"
    RESUME = "resume"
    PAUSE = "pause"
    RESET = "reset"
    TICK = "tick"
    EXPIRED = "expired"
    SKIPPED = "skipped"
    SWITCH_MODE = "switch_mode"
    SETTINGS = "settings"


@dataclass(frozen=True)
class TimerTransition:
    """Represents a state machine transition result."""

    new_state: TimerState
    trigger: TransitionTrigger
    effects: tuple = ()
    phase_completed: bool = False
    previous_mode: Optional[TimerMode] = None

    @property
    def work_completed(self) -> Optional[WorkSessionCompleted]:
        for effect in self.effects:
            if isinstance(effect, WorkSessionCompleted):
                return effect
        return None
