"""
Task registry.

Owns the ordered task collection (most recent first) and the active-task
pointer. Every mutation that could leave the pointer dangling or aimed at
a completed task repairs it before returning.
"""

from datetime import datetime
from typing import Any, Optional

import structlog

from ..config.defaults import MAX_ESTIMATED_POMODOROS
from ..errors import TaskValidationError
from ..stats.engine import StatisticsEngine
from .models import Task, new_task_id

logger = structlog.get_logger(__name__)


class TaskRegistry:
    """Task collection plus the single active-task pointer."""

    def __init__(self, stats: Optional[StatisticsEngine] = None):
        self.logger = logger
        self.stats = stats
        self.tasks: list[Task] = []
        self.active_task_id: Optional[str] = None

    def load(self, task_documents: Optional[list], active_task_id: Optional[str]) -> None:
        """Replace contents from persisted documents and repair the pointer."""
        tasks = []
        for document in task_documents or []:
            if not isinstance(document, dict):
                self.logger.warning("Skipping malformed task", document_type=type(document).__name__)
                continue
            try:
                tasks.append(Task.from_document(document))
            except (KeyError, TypeError, ValueError) as e:
                self.logger.warning("Skipping malformed task", error=str(e))
        self.tasks = tasks
        self.active_task_id = active_task_id
        self._repair_active_pointer()

    def task_documents(self) -> list[dict[str, Any]]:
        return [task.to_document() for task in self.tasks]

    def get(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    @property
    def active_task(self) -> Optional[Task]:
        if self.active_task_id is None:
            return None
        return self.get(self.active_task_id)

    def pending_tasks(self) -> list[Task]:
        return [task for task in self.tasks if not task.completed]

    def completed_tasks(self) -> list[Task]:
        return [task for task in self.tasks if task.completed]

    def add_task(self, name: str, estimated_pomodoros: Any = 1,
                 now: Optional[datetime] = None) -> Task:
        """
        Create a task at the front of the list.

        The new task becomes active when no task is active.

        Raises:
            TaskValidationError: If the name is blank or the estimate is below 1
        """
        if not isinstance(name, str) or not name.strip():
            raise TaskValidationError("Task name must not be empty", field="name", value=name)

        if (isinstance(estimated_pomodoros, bool)
                or not isinstance(estimated_pomodoros, int)
                or estimated_pomodoros < 1):
            raise TaskValidationError(
                "Estimated pomodoros must be a whole number of at least 1",
                field="estimated_pomodoros",
                value=estimated_pomodoros
            )

        now = now or datetime.now().astimezone()
        task_id = new_task_id(now)
        while self.get(task_id) is not None:
            task_id = new_task_id(now)

        task = Task(
            id=task_id,
            name=name.strip(),
            estimated_pomodoros=min(estimated_pomodoros, MAX_ESTIMATED_POMODOROS),
            created_at=now,
        )
        self.tasks.insert(0, task)

        if self.active_task_id is None:
            self.active_task_id = task.id

        self.logger.info(
            "Added task",
            task_id=task.id,
            estimated_pomodoros=task.estimated_pomodoros,
            active=self.active_task_id == task.id
        )
        return task

    def toggle_task(self, task_id: str, now: Optional[datetime] = None) -> Optional[Task]:
        """Flip completion of a task. Unknown ids are ignored."""
        task = self.get(task_id)
        if task is None:
            self.logger.debug("Toggle ignored for unknown task", task_id=task_id)
            return None

        now = now or datetime.now().astimezone()
        if task.completed:
            task.mark_incomplete()
            if self.stats is not None:
                self.stats.record_task_completion_delta(-1, now.date())
        else:
            task.mark_completed(now)
            if self.stats is not None:
                self.stats.record_task_completion_delta(1, now.date())
            if self.active_task_id == task_id:
                self.active_task_id = self._first_pending_id()

        self.logger.info(
            "Toggled task",
            task_id=task_id,
            completed=task.completed,
            active_task_id=self.active_task_id
        )
        return task

    def delete_task(self, task_id: str) -> bool:
        """Remove a task. Returns False for unknown ids."""
        task = self.get(task_id)
        if task is None:
            self.logger.debug("Delete ignored for unknown task", task_id=task_id)
            return False

        self.tasks.remove(task)
        if self.active_task_id == task_id:
            self.active_task_id = self._first_pending_id()

        self.logger.info("Deleted task", task_id=task_id, active_task_id=self.active_task_id)
        return True

    def set_active_task(self, task_id: str) -> bool:
        """Point at a task. Returns False when it is unknown or completed."""
        task = self.get(task_id)
        if task is None or task.completed:
            self.logger.debug("Activate ignored", task_id=task_id, found=task is not None)
            return False

        self.active_task_id = task_id
        return True

    def record_pomodoro(self) -> Optional[Task]:
        """Credit one completed work session to the active task, if any."""
        task = self.active_task
        if task is None:
            return None
        task.completed_pomodoros += 1
        return task

    def clear(self) -> None:
        self.tasks = []
        self.active_task_id = None

    def _first_pending_id(self) -> Optional[str]:
        for task in self.tasks:
            if not task.completed:
                return task.id
        return None

    def _repair_active_pointer(self) -> None:
        task = self.active_task
        if task is None or task.completed:
            repaired = self._first_pending_id() if self.active_task_id is not None else None
            if self.active_task_id is not None:
                self.logger.info(
                    "Repaired active task pointer",
                    stale_task_id=self.active_task_id,
                    active_task_id=repaired
                )
            self.active_task_id = repaired
