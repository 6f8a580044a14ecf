"""Terminal implementations of the notification, sound and display collaborators."""

import json
import sys
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional, TextIO

from ..errors import DisplayFailure, NotificationFailure, SoundFailure
from .base import DisplaySink, Notifier, SoundPlayer

if TYPE_CHECKING:
    from ..state.models import TimerState


class ConsoleNotifier(Notifier):
    """Prints notifications to a text stream."""

    def __init__(self, stream: Optional[TextIO] = None, format: str = "pretty"):
        super().__init__("console")
        self.stream = stream or sys.stdout
        self.format = format

    def notify(self, title: str, body: str) -> None:
        try:
            print(self._format_notification(title, body), file=self.stream, flush=True)
        except (OSError, ValueError) as e:
            self._error_count += 1
            raise NotificationFailure(
                f"Console notification failed: {e}",
                context={"title": title}
            ) from e

        self._delivery_count += 1
        self.logger.debug("Notification printed", title=title)

    def _format_notification(self, title: str, body: str) -> str:
        if self.format == "json":
            return json.dumps({
                "title": title,
                "body": body,
                "timestamp": datetime.now().astimezone().isoformat()
            })
        return f"\n** {title} ** {body}"


class TerminalBell(SoundPlayer):
    """Rings the terminal bell as the completion chime."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def play_completion_chime(self) -> None:
        try:
            self.stream.write("\a")
            self.stream.flush()
        except (OSError, ValueError) as e:
            raise SoundFailure(f"Terminal bell failed: {e}") from e


class ConsoleDisplay(DisplaySink):
    """Single-line countdown display, redrawn in place."""

    def __init__(self, stream: Optional[TextIO] = None, sessions_before_long: int = 4):
        self.stream = stream or sys.stdout
        self.sessions_before_long = sessions_before_long

    def render_timer(self, state: "TimerState") -> None:
        line = (f"\r{state.display_time}  {state.label:<14} "
                f"session {state.current_session}/{self.sessions_before_long}")
        self._write(line)

    def render_snapshot(self, snapshot: dict[str, Any]) -> None:
        self.sessions_before_long = snapshot["settings"]["sessionsBeforeLong"]
        active = snapshot.get("activeTask")
        today = snapshot["today"]
        lines = [
            "",
            f"Active task: {active['name'] if active else 'No task selected'}",
            (f"Today: {today['focusTime']} focus, {today['sessions']} sessions, "
             f"{today['tasksCompleted']} tasks done, streak {snapshot['streak']['count']}"),
        ]
        self._write("\n".join(lines) + "\n")

    def _write(self, text: str) -> None:
        try:
            self.stream.write(text)
            self.stream.flush()
        except (OSError, ValueError) as e:
            raise DisplayFailure(f"Console display failed: {e}") from e
