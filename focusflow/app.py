"""
Main application coordinator.

Wires the timer state machine, statistics engine and task registry to the
persistent store and the display/notification collaborators:

Commands → SessionController → WorkSessionCompleted → Stats + Tasks → Store
"""

import threading
from dataclasses import replace
from pathlib import Path
from typing import Any, Optional

import structlog

from .config.defaults import DOCUMENT_KEYS, Settings, StoreKeys
from .config.loader import ConfigLoader
from .config.validation import SettingsValidator
from .errors import SettingsValidationError
from .notify.base import DisplaySink, NullDisplay, Notifier, SoundPlayer
from .persistence.store import JsonFileStore, KeyValueStore
from .persistence.writer import StoreWriter
from .state.models import TimerMode, TimerState, TimerTransition, WorkSessionCompleted
from .state.runtime import SessionController
from .stats.engine import StatisticsEngine, format_minutes
from .tasks.models import Task
from .tasks.registry import TaskRegistry
from .utils.clock import Clock, Scheduler, SystemClock, day_key

logger = structlog.get_logger(__name__)

# Persisted settings document key -> Settings field
_FIELD_BY_DOCUMENT_KEY = {doc_key: name for name, doc_key in DOCUMENT_KEYS.items()}


class FocusFlowApp:
    """
    Application state owner for one focus timer instance.

    Loads persisted state at construction, applies every command to the
    in-memory state first, and hands snapshots to the write-behind writer.
    Storage failures never roll back in-memory state.
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        config_dir: Optional[Path] = None,
        config_overrides: Optional[dict[str, Any]] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Clock] = None,
        notifier: Optional[Notifier] = None,
        sound: Optional[SoundPlayer] = None,
        display: Optional[DisplaySink] = None
    ) -> None:
        """Initialize the application and load persisted state."""
        self.logger = logger

        self.config_loader = ConfigLoader.create(config_dir)
        self.app_params = self.config_loader.app_params(config_overrides)
        self.default_settings = self.config_loader.default_settings(config_overrides)
        self.keys = StoreKeys()

        self.store = store or JsonFileStore(self.app_params.data_dir)
        self.writer = StoreWriter(self.store, background=self.app_params.background_writes)
        self.clock = clock or SystemClock()
        self.display = display or NullDisplay()

        # One lock serializes user commands, ticks and auto-starts
        self._lock = threading.RLock()

        self.settings = self._load_settings()
        self.stats = StatisticsEngine.from_documents(
            self._load(self.keys.stats, {}, dict),
            self._load(self.keys.streak, {"count": 0, "lastDate": None}, dict)
        )
        self.tasks = TaskRegistry(stats=self.stats)
        self.tasks.load(
            self._load(self.keys.tasks, [], list),
            self._load(self.keys.active_task_id, None, str)
        )

        self.timer = SessionController(
            settings=self.settings,
            scheduler=scheduler,
            clock=self.clock,
            notifier=notifier,
            sound=sound,
            display=self.display,
            tick_interval=self.app_params.tick_interval_seconds,
            auto_start_delay=self.app_params.auto_start_delay_seconds,
            lock=self._lock
        )
        self.timer.add_work_session_listener(self._on_work_session_completed)

        self.logger.info(
            "FocusFlow initialized",
            data_store=type(self.store).__name__,
            tasks=len(self.tasks.tasks),
            active_task_id=self.tasks.active_task_id,
            streak=self.stats.streak.count
        )

    # Loading

    def _load(self, key: str, default: Any, expected_type: type) -> Any:
        """Read a key; missing or malformed values fall back to ``default`` and are persisted."""
        value = self.store.get(key, None)
        if isinstance(value, expected_type):
            return value

        if value is not None:
            self.logger.warning(
                "Stored value has unexpected type, using defaults",
                key=key,
                value_type=type(value).__name__
            )
        if value is not None or default is not None:
            self.writer.submit(key, default)
        return default

    def _load_settings(self) -> Settings:
        """Load stored settings; rejected fields fall back to their defaults one by one."""
        document = self._load(self.keys.settings, self.default_settings.to_document(), dict)
        candidate = Settings.from_document(document, base=self.default_settings)
        try:
            return SettingsValidator.normalize_settings(candidate)
        except SettingsValidationError as e:
            rejected = sorted({err.field for err in e.errors})
            self.logger.warning(
                "Stored settings rejected, using defaults for rejected fields",
                fields=rejected,
                errors=[f"{err.field}: {err.message}" for err in e.errors]
            )
            repaired = replace(candidate, **{
                name: getattr(self.default_settings, name) for name in rejected
            })
            settings = SettingsValidator.normalize_settings(repaired)
            self.writer.submit(self.keys.settings, settings.to_document())
            return settings

    # Persistence

    def save_settings(self) -> None:
        self.writer.submit(self.keys.settings, self.settings.to_document())

    def save_tasks(self) -> None:
        self.writer.submit(self.keys.tasks, self.tasks.task_documents())
        self.writer.submit(self.keys.active_task_id, self.tasks.active_task_id)

    def save_stats(self) -> None:
        self.writer.submit(self.keys.stats, self.stats.stats_document())
        self.writer.submit(self.keys.streak, self.stats.streak_document())

    # Timer commands

    def start(self) -> bool:
        return self.timer.start()

    def pause(self) -> bool:
        return self.timer.pause()

    def toggle(self) -> bool:
        return self.timer.toggle()

    def reset(self) -> None:
        self.timer.reset()

    def skip(self) -> TimerTransition:
        return self.timer.skip()

    def switch_mode(self, mode: TimerMode) -> bool:
        return self.timer.switch_mode(TimerMode(mode))

    def _on_work_session_completed(self, event: WorkSessionCompleted) -> None:
        with self._lock:
            self.stats.record_work_session(event.minutes, event.completed_at.date())
            credited = self.tasks.record_pomodoro()
            self.save_stats()
            self.save_tasks()
            self.logger.info(
                "Work session credited",
                minutes=event.minutes,
                task_id=credited.id if credited else None
            )
            self.render()

    # Task commands

    def add_task(self, name: str, estimated_pomodoros: Any = 1) -> Task:
        with self._lock:
            task = self.tasks.add_task(name, estimated_pomodoros, now=self.clock.now())
            self.save_tasks()
            self.render()
            return task

    def toggle_task(self, task_id: str) -> Optional[Task]:
        with self._lock:
            task = self.tasks.toggle_task(task_id, now=self.clock.now())
            if task is not None:
                self.save_tasks()
                self.save_stats()
                self.render()
            return task

    def delete_task(self, task_id: str) -> bool:
        with self._lock:
            deleted = self.tasks.delete_task(task_id)
            if deleted:
                self.save_tasks()
                self.render()
            return deleted

    def set_active_task(self, task_id: str) -> bool:
        with self._lock:
            changed = self.tasks.set_active_task(task_id)
            if changed:
                self.save_tasks()
                self.render()
            return changed

    # Settings

    def update_setting(self, key: str, value: Any) -> Settings:
        """
        Change one setting by field name or persisted document key.

        Raises:
            SettingsValidationError: If the key is unknown or the value rejected
        """
        name = _FIELD_BY_DOCUMENT_KEY.get(key, key)
        if name not in DOCUMENT_KEYS:
            raise SettingsValidationError(f"Unknown setting: {key}", field=key, value=value)

        normalized = SettingsValidator.normalize_value(name, value)

        with self._lock:
            if getattr(self.settings, name) == normalized:
                return self.settings
            self.settings = self.settings.with_value(name, normalized)
            self.save_settings()
            self.timer.update_settings(self.settings)
            self.logger.info("Setting updated", setting=name, value=normalized)
            self.render()
            return self.settings

    # Data management

    def reset_all_data(self) -> None:
        """Delete every persisted key and return to a fresh first-run state."""
        with self._lock:
            for key in self.keys.all():
                self.writer.submit_delete(key)

            self.settings = self.default_settings
            self.stats.days = {}
            self.stats.streak.count = 0
            self.stats.streak.last_counted_date = None
            self.tasks.clear()

            self.timer.update_settings(self.settings)
            self.timer.restore(TimerState.initial(self.settings))
            self.logger.info("All data reset")
            self.render()

    # Display

    def snapshot(self) -> dict[str, Any]:
        """Read-only view of everything a display needs."""
        with self._lock:
            today = self.clock.today()
            today_stats = self.stats.peek_day(today)
            active = self.tasks.active_task
            totals = self.stats.totals()
            return {
                "timer": self.timer.state.to_dict(),
                "settings": self.settings.to_document(),
                "tasks": self.tasks.task_documents(),
                "activeTask": active.to_document() if active else None,
                "today": {
                    "date": day_key(today),
                    "focusMinutes": today_stats.focus_minutes,
                    "focusTime": format_minutes(today_stats.focus_minutes),
                    "sessions": today_stats.sessions,
                    "tasksCompleted": today_stats.tasks_completed,
                },
                "streak": {
                    "count": self.stats.current_streak(today),
                    "lastDate": self.stats.streak_document()["lastDate"],
                },
                "week": [day.to_dict() for day in self.stats.weekly_series(today)],
                "totals": {
                    "focusMinutes": totals.focus_minutes,
                    "sessions": totals.sessions,
                    "tasksCompleted": totals.tasks_completed,
                    "activeDays": totals.active_days,
                },
            }

    def render(self) -> None:
        try:
            self.display.render_snapshot(self.snapshot())
        except Exception as e:
            self.logger.warning("Display failed, continuing", error=str(e), error_type=type(e).__name__)

    def shutdown(self) -> None:
        """Stop timers and flush pending writes."""
        self.timer.shutdown()
        self.writer.close()
        self.logger.info("FocusFlow shut down")
