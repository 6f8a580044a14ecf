#!/usr/bin/env python3
"""
Basic Usage Example - FocusFlow timer

This script runs a compressed pomodoro cycle against an in-memory store.
It shows how to:
- Build the application with injected collaborators
- Add tasks and pick the active one
- Drive the timer and watch work sessions land in stats and tasks
- Read the display snapshot

Ticks arrive every 10ms instead of every second, so a one-minute work
phase finishes in under a second.

Run: python examples/basic_usage.py
"""

import json
import threading

from focusflow.app import FocusFlowApp
from focusflow.logging.config import configure_logging
from focusflow.notify.console import ConsoleNotifier
from focusflow.persistence.store import MemoryStore
from focusflow.state.models import TimerMode
from focusflow.utils.clock import ThreadingScheduler


def main():
    configure_logging(level="WARNING")

    store = MemoryStore()
    app = FocusFlowApp(
        store=store,
        config_overrides={
            "app": {"tick_interval_seconds": 0.01, "auto_start_delay_seconds": 0.05},
            "settings": {
                "work_minutes": 1,
                "short_break_minutes": 1,
                "long_break_minutes": 1,
                "sessions_before_long": 2,
                "auto_start_breaks": True,
                "auto_start_work": True,
            },
        },
        scheduler=ThreadingScheduler(),
        notifier=ConsoleNotifier(),
    )

    report = app.add_task("Write report", 3)
    app.add_task("Review pull requests", 2)
    print(f"Active task: {app.tasks.active_task.name}")

    # Wait for the first long break: work, short break, work
    reached_long_break = threading.Event()

    def watch():
        while not reached_long_break.is_set():
            if app.timer.state.mode == TimerMode.LONG_BREAK:
                reached_long_break.set()
            reached_long_break.wait(0.01)

    watcher = threading.Thread(target=watch, daemon=True)
    watcher.start()

    app.start()
    if not reached_long_break.wait(10):
        print("Timed out waiting for the long break")
    app.shutdown()

    print(f"\nPomodoros on '{report.name}': {report.completed_pomodoros}/{report.estimated_pomodoros}")
    snapshot = app.snapshot()
    print(json.dumps({"today": snapshot["today"], "streak": snapshot["streak"]}, indent=2))
    print(f"Persisted keys: {sorted(store.get_all())}")


if __name__ == "__main__":
    main()
