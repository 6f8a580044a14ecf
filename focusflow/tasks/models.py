"""Task data model."""

import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


def new_task_id(now: datetime) -> str:
    """Opaque id: millisecond timestamp in hex plus a random suffix."""
    return f"{int(now.timestamp() * 1000):x}{secrets.token_hex(3)}"


@dataclass
class Task:
    """A unit of work that pomodoros are credited to."""

    id: str
    name: str
    estimated_pomodoros: int = 1
    completed_pomodoros: int = 0
    completed: bool = False
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None     # Set iff completed

    def mark_completed(self, now: datetime) -> None:
        self.completed = True
        self.completed_at = now

    def mark_incomplete(self) -> None:
        self.completed = False
        self.completed_at = None

    def to_document(self) -> dict[str, Any]:
        document = {
            "id": self.id,
            "name": self.name,
            "estimatedPomodoros": self.estimated_pomodoros,
            "completedPomodoros": self.completed_pomodoros,
            "completed": self.completed,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
        if self.completed_at is not None:
            document["completedAt"] = self.completed_at.isoformat()
        return document

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "Task":
        """Rebuild a task, restoring the completed/completedAt pairing."""
        completed = bool(document.get("completed", False))
        completed_at = _parse_timestamp(document.get("completedAt")) if completed else None
        created_at = _parse_timestamp(document.get("createdAt"))
        if completed and completed_at is None:
            completed_at = created_at or datetime.now().astimezone()

        name = document.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"Task {document['id']!r} has no name")

        return cls(
            id=str(document["id"]),
            name=name.strip(),
            estimated_pomodoros=max(1, int(document.get("estimatedPomodoros", 1) or 1)),
            completed_pomodoros=max(0, int(document.get("completedPomodoros", 0) or 0)),
            completed=completed,
            created_at=created_at,
            completed_at=completed_at,
        )


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not value:
        return None
    try:
        # Stored timestamps may carry a trailing "Z"
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
