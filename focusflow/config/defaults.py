"""Default configuration parameters for the focus timer."""

from dataclasses import dataclass, fields, replace
from typing import Any, Optional


@dataclass(frozen=True)
class Settings:
    """User-editable timer settings."""
    # Phase durations (minutes)
    work_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15

    # Work sessions per long-break cycle
    sessions_before_long: int = 4

    # Auto-start of the next phase after completion
    auto_start_breaks: bool = True
    auto_start_work: bool = False

    # Completion feedback
    notifications_enabled: bool = True
    sound_enabled: bool = True

    def with_value(self, name: str, value: Any) -> "Settings":
        """Return a copy with one field replaced."""
        return replace(self, **{name: value})

    def to_document(self) -> dict[str, Any]:
        """Convert to the persisted document layout."""
        return {
            doc_key: getattr(self, name)
            for name, doc_key in DOCUMENT_KEYS.items()
        }

    @classmethod
    def from_document(cls, document: Optional[dict[str, Any]],
                      base: Optional["Settings"] = None) -> "Settings":
        """Overlay a persisted document on ``base`` (defaults when omitted).

        Unknown keys are ignored; missing keys keep the base value.
        """
        base = base or cls()
        if not document:
            return base
        overrides = {}
        for name, doc_key in DOCUMENT_KEYS.items():
            if doc_key in document:
                overrides[name] = document[doc_key]
            elif name in document:
                overrides[name] = document[name]
        return replace(base, **overrides)


# Settings field -> key in the persisted settings document
DOCUMENT_KEYS = {
    "work_minutes": "work",
    "short_break_minutes": "shortBreak",
    "long_break_minutes": "longBreak",
    "sessions_before_long": "sessionsBeforeLong",
    "auto_start_breaks": "autoStartBreaks",
    "auto_start_work": "autoStartPomodoros",
    "notifications_enabled": "notifications",
    "sound_enabled": "sound",
}

# Inclusive (minimum, maximum) for numeric settings. Values below the minimum
# are rejected, values above the maximum are clamped.
SETTING_LIMITS = {
    "work_minutes": (1, 90),
    "short_break_minutes": (1, 30),
    "long_break_minutes": (1, 60),
    "sessions_before_long": (2, 8),
}

BOOLEAN_SETTINGS = tuple(
    f.name for f in fields(Settings) if f.name not in SETTING_LIMITS
)

# Upper bound of the per-task pomodoro estimate
MAX_ESTIMATED_POMODOROS = 10


@dataclass(frozen=True)
class StoreKeys:
    """Persisted key namespace."""
    settings: str = "settings"
    tasks: str = "tasks"
    stats: str = "stats"
    streak: str = "streak"
    active_task_id: str = "activeTaskId"

    def all(self) -> tuple[str, ...]:
        return (self.settings, self.tasks, self.stats, self.streak, self.active_task_id)


@dataclass(frozen=True)
class AppParams:
    """Runtime wiring parameters."""
    data_dir: str = "~/.focusflow/data"
    tick_interval_seconds: float = 1.0
    auto_start_delay_seconds: float = 0.5   # Deferred start after phase completion
    background_writes: bool = True          # Write-behind persistence worker


@dataclass(frozen=True)
class LoggingParams:
    """Logging parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    app: AppParams
    logging: LoggingParams
    settings: Settings
    keys: StoreKeys


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        app=AppParams(),
        logging=LoggingParams(),
        settings=Settings(),
        keys=StoreKeys(),
    )
