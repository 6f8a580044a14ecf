"""
Core focus timer state machine logic.

Every function here is pure: it takes the current ``TimerState`` and the
``Settings`` and returns a ``TimerTransition`` describing the new state and
the ordered effects the caller must apply, or ``None`` when the command is
a no-op in the current state. Nothing here touches collaborators, stats or
tasks.
"""

from datetime import datetime
from typing import Optional

from ..config.defaults import Settings
from ..logging.config import get_timer_logger, log_phase_transition
from .models import (
    Notify,
    PlayChime,
    ScheduleAutoStart,
    TimerMode,
    TimerState,
    TimerTransition,
    TransitionTrigger,
    WorkSessionCompleted,
)

timer_logger = get_timer_logger(__name__)


def start_timer(state: TimerState) -> Optional[TimerTransition]:
    """Start from Ready or resume from Paused. No-op while already ticking."""
    if state.ticking:
        return None

    trigger = TransitionTrigger.RESUME if state.paused else TransitionTrigger.START
    return TimerTransition(new_state=state.started(), trigger=trigger)


def pause_timer(state: TimerState) -> Optional[TimerTransition]:
    """Pause a ticking timer. No-op otherwise."""
    if not state.ticking:
        return None

    return TimerTransition(new_state=state.paused_state(), trigger=TransitionTrigger.PAUSE)


def reset_timer(state: TimerState, settings: Settings) -> TimerTransition:
    """Stop and restore the full duration of the current mode from settings."""
    return TimerTransition(
        new_state=state.stopped().with_full_duration(settings),
        trigger=TransitionTrigger.RESET
    )


def switch_mode(state: TimerState, mode: TimerMode, settings: Settings) -> Optional[TimerTransition]:
    """Select another phase. Only permitted while the timer is not running."""
    if state.running:
        timer_logger.debug("Mode switch ignored while running", requested_mode=mode.value)
        return None

    return TimerTransition(
        new_state=state.with_mode(mode, settings),
        trigger=TransitionTrigger.SWITCH_MODE,
        previous_mode=state.mode
    )


def apply_settings(state: TimerState, settings: Settings) -> Optional[TimerTransition]:
    """Pick up edited durations. A running or paused phase keeps its length."""
    if state.running:
        return None

    new_state = state.with_full_duration(settings)
    if new_state == state:
        return None
    return TimerTransition(new_state=new_state, trigger=TransitionTrigger.SETTINGS)


def tick_timer(state: TimerState, settings: Settings, now: datetime) -> Optional[TimerTransition]:
    """
    Advance the countdown by one second.

    Ticks delivered while the timer is not ticking are ignored. When the
    countdown reaches zero the phase completes instead of going negative.
    """
    if not state.ticking:
        return None

    remaining = state.remaining_seconds - 1
    if remaining <= 0:
        return complete_phase(state, settings, now, TransitionTrigger.EXPIRED)

    return TimerTransition(
        new_state=state.with_remaining(remaining),
        trigger=TransitionTrigger.TICK
    )


def skip_phase(state: TimerState, settings: Settings, now: datetime) -> TimerTransition:
    """Complete the current phase immediately, whatever the remaining time."""
    return complete_phase(state, settings, now, TransitionTrigger.SKIPPED)


def complete_phase(
    state: TimerState,
    settings: Settings,
    now: datetime,
    trigger: TransitionTrigger
) -> TimerTransition:
    """
    Finish the current phase and move to the next one in the cycle.

    Effects are ordered: chime, notification, work-session credit, auto-start.

    Args:
        state: Timer state at the moment the phase ends
        settings: Current settings
        now: Completion time, used to date the work session
        trigger: EXPIRED for natural expiry, SKIPPED for a manual skip

    Returns:
        Transition into the next phase, stopped
    """
    stopped = state.stopped()
    effects = []

    if settings.sound_enabled:
        effects.append(PlayChime())

    if state.mode == TimerMode.WORK:
        if state.current_session >= settings.sessions_before_long:
            next_mode = TimerMode.LONG_BREAK
            next_session = 0
            title = "Long break time!"
            body = (f"Great work! You completed {settings.sessions_before_long} "
                    "sessions. Take a longer break.")
        else:
            next_mode = TimerMode.SHORT_BREAK
            next_session = state.current_session
            title = "Break time!"
            body = "Good job! Take a short break."
        auto_start = settings.auto_start_breaks
    else:
        if state.mode == TimerMode.LONG_BREAK:
            next_session = 1
        else:
            next_session = state.current_session + 1
        next_mode = TimerMode.WORK
        title = "Break is over!"
        body = "Time to focus again."
        auto_start = settings.auto_start_work

    if settings.notifications_enabled:
        effects.append(Notify(title=title, body=body))

    if state.mode == TimerMode.WORK:
        effects.append(WorkSessionCompleted(minutes=settings.work_minutes, completed_at=now))

    if auto_start:
        effects.append(ScheduleAutoStart(mode=next_mode))

    new_state = stopped.with_mode(next_mode, settings).with_session(next_session)

    log_phase_transition(
        timer_logger,
        from_mode=state.mode.value,
        to_mode=next_mode.value,
        trigger=trigger.value,
        session_index=next_session,
        context={
            "remaining_seconds": max(0, state.remaining_seconds),
            "was_running": state.running,
            "auto_start": auto_start,
            "completed_at": now.isoformat()
        }
    )

    return TimerTransition(
        new_state=new_state,
        trigger=trigger,
        effects=tuple(effects),
        phase_completed=True,
        previous_mode=state.mode
    )
