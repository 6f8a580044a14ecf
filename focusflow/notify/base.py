"""Base classes for notification, sound and display collaborators."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from ..logging.config import get_logger

if TYPE_CHECKING:
    from ..state.models import TimerState


class Notifier(ABC):
    """Delivers desktop notifications."""

    def __init__(self, name: str):
        self.name = name
        self.logger = get_logger(f"focusflow.notify.{name}")
        self._delivery_count = 0
        self._error_count = 0

    @abstractmethod
    def notify(self, title: str, body: str) -> None:
        """
        Show a notification.

        Implementations may raise ``NotificationFailure``; callers treat it
        as non-fatal.
        """
        pass

    def get_stats(self) -> dict[str, Any]:
        """Get delivery statistics."""
        return {
            "name": self.name,
            "delivery_count": self._delivery_count,
            "error_count": self._error_count,
        }


class SoundPlayer(ABC):
    """Plays the phase completion chime."""

    @abstractmethod
    def play_completion_chime(self) -> None:
        """Play the chime. May raise ``SoundFailure``."""
        pass


class DisplaySink(ABC):
    """Read-only consumer of core state for rendering."""

    @abstractmethod
    def render_timer(self, state: "TimerState") -> None:
        """Render the timer. May raise ``DisplayFailure``."""
        pass

    def render_snapshot(self, snapshot: dict[str, Any]) -> None:
        """Render a full application snapshot (tasks, stats, streak)."""
        pass


class NullNotifier(Notifier):
    """Discards notifications."""

    def __init__(self):
        super().__init__("null")

    def notify(self, title: str, body: str) -> None:
        self._delivery_count += 1


class NullSound(SoundPlayer):
    """Plays nothing."""

    def play_completion_chime(self) -> None:
        pass


class NullDisplay(DisplaySink):
    """Renders nothing."""

    def render_timer(self, state: "TimerState") -> None:
        pass
