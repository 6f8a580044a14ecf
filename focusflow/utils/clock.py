"""
Clock and scheduler primitives.

The timer core never reads the wall clock or sleeps on its own. It asks an
injected ``Clock`` for the current time and an injected ``Scheduler`` for
cancellable tick and deferred-start callbacks, so tests can drive it
without real time passing.
"""

import threading
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from ..logging.config import get_logger

logger = get_logger(__name__)


def day_key(day: date) -> str:
    """Format a calendar date as a statistics day key (YYYY-MM-DD)."""
    return day.isoformat()


def parse_day_key(key: str) -> date:
    """Parse a YYYY-MM-DD day key."""
    return date.fromisoformat(key)


def previous_day(day: date) -> date:
    """Calendar day before ``day``."""
    return day - timedelta(days=1)


def week_start(day: date) -> date:
    """Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


class Clock(ABC):
    """Source of the current wall-clock time."""

    @abstractmethod
    def now(self) -> datetime:
        """Current local time."""

    def today(self) -> date:
        """Current local calendar date."""
        return self.now().date()


class SystemClock(Clock):
    """Local wall-clock time as an aware datetime."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class Handle(ABC):
    """Cancellable scheduled callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent any further invocations. Safe to call more than once."""

    @property
    @abstractmethod
    def cancelled(self) -> bool:
        """True once ``cancel`` has been called."""


class Scheduler(ABC):
    """Schedules one-shot and repeating callbacks."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> Handle:
        """Invoke ``callback`` once after ``delay`` seconds."""

    @abstractmethod
    def call_repeating(self, interval: float, callback: Callable[[], None]) -> Handle:
        """Invoke ``callback`` every ``interval`` seconds until cancelled."""


class _ThreadHandle(Handle):
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float) -> bool:
        return self._event.wait(timeout)


class ThreadingScheduler(Scheduler):
    """Scheduler backed by daemon threads."""

    def __init__(self, name: str = "focusflow") -> None:
        self.name = name

    def call_later(self, delay: float, callback: Callable[[], None]) -> Handle:
        handle = _ThreadHandle()

        def run() -> None:
            if handle.wait(delay):
                return
            handle.cancel()
            self._invoke(callback)

        self._spawn(run, "later")
        return handle

    def call_repeating(self, interval: float, callback: Callable[[], None]) -> Handle:
        if interval <= 0:
            raise ValueError(f"Repeating interval must be positive, got {interval!r}")
        handle = _ThreadHandle()

        def run() -> None:
            while not handle.wait(interval):
                self._invoke(callback)

        self._spawn(run, "repeating")
        return handle

    def _spawn(self, target: Callable[[], None], kind: str) -> None:
        thread = threading.Thread(target=target, name=f"{self.name}-{kind}", daemon=True)
        thread.start()

    def _invoke(self, callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception as e:
            # Keep the driver thread alive; the failure belongs to the callback
            logger.exception("Scheduled callback failed", error=str(e))


def optional_now(clock: Clock, now: Optional[datetime] = None) -> datetime:
    """Return ``now`` when supplied, otherwise the clock's current time."""
    return now if now is not None else clock.now()
