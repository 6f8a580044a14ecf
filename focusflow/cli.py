"""Command line front end for the focus timer."""

import argparse
import sys
import threading
from pathlib import Path
from typing import Any, Optional

from .app import FocusFlowApp
from .config.loader import ConfigLoader
from .errors import ValidationError
from .logging.config import configure_logging
from .notify.console import ConsoleDisplay, ConsoleNotifier, TerminalBell
from .state.models import TimerMode
from .utils.clock import ThreadingScheduler


def _parse_value(raw: str) -> Any:
    lowered = raw.strip().lower()
    if lowered in ("true", "on", "yes"):
        return True
    if lowered in ("false", "off", "no"):
        return False
    return raw


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="focusflow", description="Focus timer with tasks and daily stats")
    parser.add_argument("--config-dir", type=Path, help="Directory containing focusflow.yaml")
    parser.add_argument("--data-dir", help="Override the data directory")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run the timer in this terminal")
    run.add_argument("--mode", choices=[m.value for m in TimerMode], default=TimerMode.WORK.value)

    task = sub.add_parser("task", help="Manage tasks")
    task_sub = task.add_subparsers(dest="task_command", required=True)
    add = task_sub.add_parser("add", help="Add a task")
    add.add_argument("name")
    add.add_argument("-p", "--pomodoros", type=int, default=1)
    task_sub.add_parser("list", help="List tasks")
    for name, help_text in (("done", "Toggle completion"), ("rm", "Delete a task"),
                            ("activate", "Make a task active")):
        cmd = task_sub.add_parser(name, help=help_text)
        cmd.add_argument("task_id")

    sub.add_parser("stats", help="Show today, this week and the streak")

    setting = sub.add_parser("set", help="Change a setting")
    setting.add_argument("key")
    setting.add_argument("value")

    reset = sub.add_parser("reset-data", help="Delete all stored data")
    reset.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    return parser


def _create_app(args: argparse.Namespace, background_writes: bool, **collaborators) -> FocusFlowApp:
    overrides: dict[str, Any] = {"app": {"background_writes": background_writes}}
    if args.data_dir:
        overrides["app"]["data_dir"] = args.data_dir
    return FocusFlowApp(config_dir=args.config_dir, config_overrides=overrides, **collaborators)


def _run_timer(args: argparse.Namespace) -> int:
    display = ConsoleDisplay()
    app = _create_app(
        args,
        background_writes=True,
        scheduler=ThreadingScheduler(),
        notifier=ConsoleNotifier(),
        sound=TerminalBell(),
        display=display,
    )
    app.render()
    app.switch_mode(TimerMode(args.mode))
    app.start()

    stop = threading.Event()
    try:
        while not stop.wait(0.5):
            pass
    except KeyboardInterrupt:
        print()
    finally:
        app.shutdown()
    return 0


def _print_tasks(app: FocusFlowApp) -> None:
    if not app.tasks.tasks:
        print("No tasks")
        return
    for task in app.tasks.tasks:
        marker = "x" if task.completed else ("*" if task.id == app.tasks.active_task_id else " ")
        print(f"[{marker}] {task.id}  {task.name}  {task.completed_pomodoros}/{task.estimated_pomodoros}")


def _print_stats(app: FocusFlowApp) -> None:
    snapshot = app.snapshot()
    today = snapshot["today"]
    streak = snapshot["streak"]["count"]
    print(f"Today ({today['date']}): {today['focusTime']} focus, "
          f"{today['sessions']} sessions, {today['tasksCompleted']} tasks done")
    print(f"Streak: {streak} day{'s' if streak != 1 else ''}")
    print("This week:")
    for day in snapshot["week"]:
        print(f"  {day['day']}  {day['minutes']:>4}m")


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging_params = ConfigLoader.create(args.config_dir).logging_params()
    configure_logging(level=logging_params.level, format_json=logging_params.format_json)

    if args.command == "run":
        return _run_timer(args)

    app = _create_app(args, background_writes=False)
    try:
        if args.command == "task":
            if args.task_command == "add":
                task = app.add_task(args.name, args.pomodoros)
                print(f"Added {task.id}")
            elif args.task_command == "list":
                _print_tasks(app)
            elif args.task_command == "done":
                if app.toggle_task(args.task_id) is None:
                    print(f"No task {args.task_id}")
            elif args.task_command == "rm":
                if not app.delete_task(args.task_id):
                    print(f"No task {args.task_id}")
            elif args.task_command == "activate":
                if not app.set_active_task(args.task_id):
                    print(f"Cannot activate {args.task_id}")
        elif args.command == "stats":
            _print_stats(app)
        elif args.command == "set":
            app.update_setting(args.key, _parse_value(args.value))
        elif args.command == "reset-data":
            if not args.yes and input("Reset all data? This cannot be undone [y/N] ").lower() != "y":
                return 1
            app.reset_all_data()
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    finally:
        app.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
