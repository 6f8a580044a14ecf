"""Pytest configuration and shared fixtures."""

import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from focusflow.app import FocusFlowApp
from focusflow.config.defaults import Settings
from focusflow.persistence.store import MemoryStore
from focusflow.state.runtime import SessionController
from focusflow.utils.clock import Clock, Handle, Scheduler


class ManualClock(Clock):
    """Clock that only moves when told to."""

    def __init__(self, start: datetime):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


class ManualHandle(Handle):
    def __init__(self, due: float, callback: Callable[[], None], interval: Optional[float] = None):
        self.due = due
        self.callback = callback
        self.interval = interval
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualScheduler(Scheduler):
    """Scheduler whose time advances only through ``advance``."""

    def __init__(self):
        self.time = 0.0
        self.handles: List[ManualHandle] = []

    def call_later(self, delay, callback):
        handle = ManualHandle(self.time + delay, callback)
        self.handles.append(handle)
        return handle

    def call_repeating(self, interval, callback):
        handle = ManualHandle(self.time + interval, callback, interval)
        self.handles.append(handle)
        return handle

    @property
    def active(self) -> List[ManualHandle]:
        return [h for h in self.handles if not h.cancelled]

    def advance(self, seconds: float) -> None:
        """Fire every callback that falls due within ``seconds``, in time order."""
        target = self.time + seconds
        while True:
            due = [h for h in self.active if h.due <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.due)
            self.time = handle.due
            if handle.interval is None:
                handle.cancel()
            else:
                handle.due += handle.interval
            handle.callback()
        self.time = target


# Wednesday
START = datetime(2024, 1, 10, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(START)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def settings() -> Settings:
    """Default settings with auto-start off, so phases only advance on command."""
    return Settings(auto_start_breaks=False, auto_start_work=False)


@pytest.fixture
def short_settings() -> Settings:
    """One-minute phases for driving full cycles quickly."""
    return Settings(
        work_minutes=1,
        short_break_minutes=1,
        long_break_minutes=1,
        sessions_before_long=4,
        auto_start_breaks=False,
        auto_start_work=False,
    )


@pytest.fixture
def controller_factory(scheduler, clock):
    def factory(settings: Settings, **kwargs) -> SessionController:
        return SessionController(settings, scheduler=scheduler, clock=clock, **kwargs)
    return factory


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def app_factory(tmp_path, scheduler, clock, memory_store):
    """Build apps against an empty config dir and synchronous writes."""
    created = []

    def factory(store=None, settings_overrides=None, **kwargs) -> FocusFlowApp:
        overrides = {"app": {"background_writes": False}}
        if settings_overrides:
            overrides["settings"] = settings_overrides
        app = FocusFlowApp(
            store=store if store is not None else memory_store,
            config_dir=tmp_path / "config",
            config_overrides=overrides,
            scheduler=scheduler,
            clock=clock,
            **kwargs
        )
        created.append(app)
        return app

    yield factory

    for app in created:
        app.shutdown()
