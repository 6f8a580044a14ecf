"""
Runtime state management for the focus timer.

This module owns the single live ``TimerState``, drives it with the tick
driver and the deferred auto-start, and applies the effects returned by
the pure transitions in ``machine`` to the injected collaborators.
"""

import threading
from datetime import datetime
from typing import Callable, Optional

import structlog

from ..config.defaults import Settings
from ..notify.base import DisplaySink, NullDisplay, NullNotifier, NullSound, Notifier, SoundPlayer
from ..utils.clock import Clock, Handle, Scheduler, SystemClock, ThreadingScheduler, optional_now
from . import machine
from .models import (
    Notify,
    PlayChime,
    ScheduleAutoStart,
    TimerMode,
    TimerState,
    TimerTransition,
    WorkSessionCompleted,
)

logger = structlog.get_logger(__name__)

WorkSessionListener = Callable[[WorkSessionCompleted], None]


class SessionController:
    """Owns the timer state and serializes every stimulus that changes it."""

    def __init__(
        self,
        settings: Settings,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Clock] = None,
        notifier: Optional[Notifier] = None,
        sound: Optional[SoundPlayer] = None,
        display: Optional[DisplaySink] = None,
        tick_interval: float = 1.0,
        auto_start_delay: float = 0.5,
        lock: Optional["threading.RLock"] = None
    ):
        self.logger = logger
        self.scheduler = scheduler or ThreadingScheduler()
        self.clock = clock or SystemClock()
        self.notifier = notifier or NullNotifier()
        self.sound = sound or NullSound()
        self.display = display or NullDisplay()
        self.tick_interval = tick_interval
        self.auto_start_delay = auto_start_delay

        self._lock = lock or threading.RLock()
        self._settings = settings
        self._state = TimerState.initial(settings)
        self._work_listeners: list[WorkSessionListener] = []

        # Generation counters let late callbacks from a cancelled handle detect
        # that they are stale.
        self._tick_handle: Optional[Handle] = None
        self._tick_generation = 0
        self._auto_start_handle: Optional[Handle] = None
        self._auto_start_generation = 0

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def auto_start_pending(self) -> bool:
        return self._auto_start_handle is not None

    def add_work_session_listener(self, listener: WorkSessionListener) -> None:
        """Register a callback for completed work sessions."""
        self._work_listeners.append(listener)

    # Commands

    def start(self) -> bool:
        """Start or resume the timer. Returns False when already ticking."""
        with self._lock:
            self._cancel_auto_start()
            return self._start()

    def pause(self) -> bool:
        """Pause a ticking timer. Returns False when there was nothing to pause."""
        with self._lock:
            self._cancel_auto_start()
            transition = machine.pause_timer(self._state)
            if transition is None:
                return False
            self._stop_tick_driver()
            self._apply(transition)
            return True

    def toggle(self) -> bool:
        """Pause when ticking, otherwise start. Returns True when now ticking."""
        with self._lock:
            if self._state.ticking:
                self.pause()
            else:
                self.start()
            return self._state.ticking

    def reset(self) -> None:
        """Stop and restore the full duration of the current mode."""
        with self._lock:
            self._cancel_auto_start()
            self._stop_tick_driver()
            self._apply(machine.reset_timer(self._state, self._settings))

    def skip(self, now: Optional[datetime] = None) -> TimerTransition:
        """Complete the current phase immediately."""
        with self._lock:
            self._cancel_auto_start()
            self._stop_tick_driver()
            transition = machine.skip_phase(
                self._state, self._settings, optional_now(self.clock, now)
            )
            self._apply(transition)
            return transition

    def tick(self, now: Optional[datetime] = None) -> Optional[TimerTransition]:
        """Advance the countdown by one second. Ignored unless ticking."""
        with self._lock:
            transition = machine.tick_timer(
                self._state, self._settings, optional_now(self.clock, now)
            )
            if transition is None:
                return None
            if transition.phase_completed:
                self._stop_tick_driver()
            self._apply(transition)
            return transition

    def switch_mode(self, mode: TimerMode) -> bool:
        """Select a phase while stopped. Returns False when running."""
        with self._lock:
            self._cancel_auto_start()
            transition = machine.switch_mode(self._state, mode, self._settings)
            if transition is None:
                return False
            self._apply(transition)
            return True

    def update_settings(self, settings: Settings) -> None:
        """Swap in new settings; an idle timer picks up the new duration."""
        with self._lock:
            self._settings = settings
            transition = machine.apply_settings(self._state, settings)
            if transition is not None:
                self._apply(transition)

    def restore(self, state: TimerState) -> None:
        """Replace the state wholesale, stopping all scheduled callbacks."""
        with self._lock:
            self._cancel_auto_start()
            self._stop_tick_driver()
            self._state = state
            self._render()
            if state.ticking:
                self._start_tick_driver()

    def shutdown(self) -> None:
        """Cancel the tick driver and any pending auto-start."""
        with self._lock:
            self._cancel_auto_start()
            self._stop_tick_driver()

    # Internals

    def _start(self) -> bool:
        transition = machine.start_timer(self._state)
        if transition is None:
            return False
        self._apply(transition)
        self._start_tick_driver()
        return True

    def _apply(self, transition: TimerTransition) -> None:
        old_state = self._state
        self._state = transition.new_state

        self.logger.debug(
            "Updated timer state",
            trigger=transition.trigger.value,
            old_mode=old_state.mode.value,
            old_status=old_state.status.value,
            new_mode=transition.new_state.mode.value,
            new_status=transition.new_state.status.value,
            remaining_seconds=transition.new_state.remaining_seconds
        )

        for effect in transition.effects:
            if isinstance(effect, PlayChime):
                self._call_collaborator("sound", self.sound.play_completion_chime)
            elif isinstance(effect, Notify):
                self._call_collaborator("notifier", self.notifier.notify, effect.title, effect.body)
            elif isinstance(effect, WorkSessionCompleted):
                for listener in self._work_listeners:
                    self._call_collaborator("work_session_listener", listener, effect)
            elif isinstance(effect, ScheduleAutoStart):
                self._schedule_auto_start(effect.mode)

        self._render()

    def _render(self) -> None:
        self._call_collaborator("display", self.display.render_timer, self._state)

    def _call_collaborator(self, name: str, func: Callable, *args) -> None:
        try:
            func(*args)
        except Exception as e:
            self.logger.warning(
                "Collaborator failed, continuing",
                collaborator=name,
                error=str(e),
                error_type=type(e).__name__
            )

    def _start_tick_driver(self) -> None:
        self._stop_tick_driver()
        generation = self._tick_generation
        self._tick_handle = self.scheduler.call_repeating(
            self.tick_interval, lambda: self._on_tick(generation)
        )

    def _stop_tick_driver(self) -> None:
        self._tick_generation += 1
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _on_tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._tick_generation:
                return
            self.tick()

    def _schedule_auto_start(self, mode: TimerMode) -> None:
        self._cancel_auto_start()
        generation = self._auto_start_generation
        self._auto_start_handle = self.scheduler.call_later(
            self.auto_start_delay, lambda: self._on_auto_start(generation)
        )
        self.logger.debug("Scheduled auto-start", mode=mode.value, delay=self.auto_start_delay)

    def _cancel_auto_start(self) -> None:
        self._auto_start_generation += 1
        if self._auto_start_handle is not None:
            self._auto_start_handle.cancel()
            self._auto_start_handle = None
            self.logger.debug("Cancelled pending auto-start")

    def _on_auto_start(self, generation: int) -> None:
        with self._lock:
            if generation != self._auto_start_generation:
                return
            self._auto_start_handle = None
            self._start()
