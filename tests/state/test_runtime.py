"""Tests for the session controller driving the timer over a scheduler."""

from dataclasses import replace
from unittest.mock import MagicMock

import pytest

from focusflow.errors import DisplayFailure, NotificationFailure, SoundFailure
from focusflow.state.models import TimerMode, TimerState, TimerStatus


class TestTickDriver:
    """Test the repeating tick driver."""

    def test_start_schedules_one_repeating_tick(self, controller_factory, settings, scheduler):
        controller = controller_factory(settings)

        assert controller.start() is True
        assert controller.start() is False
        assert len(scheduler.active) == 1
        assert scheduler.active[0].interval == 1.0

    def test_ticks_count_down(self, controller_factory, settings, scheduler):
        controller = controller_factory(settings)
        controller.start()

        scheduler.advance(10)

        assert controller.state.remaining_seconds == 25 * 60 - 10
        assert controller.state.status == TimerStatus.RUNNING

    def test_phase_completes_exactly_once(self, controller_factory, short_settings, scheduler):
        controller = controller_factory(short_settings)
        completions = []
        controller.add_work_session_listener(completions.append)
        controller.start()

        scheduler.advance(60)

        assert len(completions) == 1
        assert completions[0].minutes == 1
        assert controller.state.mode == TimerMode.SHORT_BREAK
        assert controller.state.running is False
        assert scheduler.active == []

        # Nothing more happens while stopped
        scheduler.advance(120)
        assert len(completions) == 1
        assert controller.state.remaining_seconds == 60

    def test_completion_timestamp_comes_from_clock(self, controller_factory, short_settings, scheduler, clock):
        controller = controller_factory(short_settings)
        completions = []
        controller.add_work_session_listener(completions.append)
        clock.advance(minutes=1)

        controller.start()
        scheduler.advance(60)

        assert completions[0].completed_at == clock.now()

    def test_pause_stops_ticks(self, controller_factory, settings, scheduler):
        controller = controller_factory(settings)
        controller.start()
        scheduler.advance(5)

        assert controller.pause() is True
        assert controller.pause() is False
        scheduler.advance(30)

        assert controller.state.status == TimerStatus.PAUSED
        assert controller.state.remaining_seconds == 25 * 60 - 5
        assert scheduler.active == []

    def test_resume_continues_from_remaining(self, controller_factory, settings, scheduler):
        controller = controller_factory(settings)
        controller.start()
        scheduler.advance(5)
        controller.pause()

        controller.start()
        scheduler.advance(5)

        assert controller.state.remaining_seconds == 25 * 60 - 10

    def test_toggle(self, controller_factory, settings):
        controller = controller_factory(settings)

        assert controller.toggle() is True
        assert controller.state.status == TimerStatus.RUNNING
        assert controller.toggle() is False
        assert controller.state.status == TimerStatus.PAUSED
        assert controller.toggle() is True

    def test_reset_cancels_ticks(self, controller_factory, settings, scheduler):
        controller = controller_factory(settings)
        controller.start()
        scheduler.advance(30)

        controller.reset()
        scheduler.advance(30)

        assert controller.state.status == TimerStatus.READY
        assert controller.state.remaining_seconds == 25 * 60
        assert scheduler.active == []

    def test_stale_tick_callback_is_ignored(self, controller_factory, settings, scheduler):
        """A tick that was already in flight when the driver stopped does nothing."""
        controller = controller_factory(settings)
        controller.start()
        handle = scheduler.active[0]
        controller.pause()

        handle.callback()

        assert controller.state.remaining_seconds == 25 * 60

    def test_restore_resumes_ticking_state(self, controller_factory, settings, scheduler):
        controller = controller_factory(settings)
        state = TimerState.initial(settings).started().with_remaining(100)

        controller.restore(state)
        scheduler.advance(3)

        assert controller.state.remaining_seconds == 97


class TestCommands:
    """Test commands that are refused or reshape the timer."""

    def test_switch_mode_refused_while_running(self, controller_factory, settings):
        controller = controller_factory(settings)
        controller.start()

        assert controller.switch_mode(TimerMode.LONG_BREAK) is False
        assert controller.state.mode == TimerMode.WORK

    def test_switch_mode_when_stopped(self, controller_factory, settings):
        controller = controller_factory(settings)

        assert controller.switch_mode(TimerMode.SHORT_BREAK) is True
        assert controller.state.remaining_seconds == 5 * 60

    def test_skip_while_running(self, controller_factory, settings, scheduler):
        controller = controller_factory(settings)
        completions = []
        controller.add_work_session_listener(completions.append)
        controller.start()
        scheduler.advance(30)

        transition = controller.skip()

        assert transition.phase_completed is True
        assert len(completions) == 1
        assert controller.state.mode == TimerMode.SHORT_BREAK
        assert scheduler.active == []

    def test_update_settings_idle_and_running(self, controller_factory, settings):
        controller = controller_factory(settings)

        controller.update_settings(replace(settings, work_minutes=40))
        assert controller.state.total_seconds == 40 * 60

        controller.start()
        controller.update_settings(replace(settings, work_minutes=10))
        assert controller.state.total_seconds == 40 * 60
        assert controller.settings.work_minutes == 10

        # Picked up at the next reset
        controller.reset()
        assert controller.state.total_seconds == 10 * 60


class TestAutoStart:
    """Test the deferred start of the next phase."""

    def test_break_auto_starts_after_delay(self, controller_factory, short_settings, scheduler):
        controller = controller_factory(replace(short_settings, auto_start_breaks=True))
        controller.start()
        scheduler.advance(60)

        assert controller.auto_start_pending is True
        assert controller.state.status == TimerStatus.READY

        scheduler.advance(0.5)

        assert controller.auto_start_pending is False
        assert controller.state.mode == TimerMode.SHORT_BREAK
        assert controller.state.status == TimerStatus.RUNNING

    def test_no_auto_start_when_disabled(self, controller_factory, short_settings, scheduler):
        controller = controller_factory(short_settings)
        controller.start()
        scheduler.advance(61)

        assert controller.auto_start_pending is False
        assert controller.state.status == TimerStatus.READY

    @pytest.mark.parametrize("command", ["reset", "pause", "skip"])
    def test_manual_command_cancels_pending_auto_start(self, controller_factory, short_settings, scheduler, command):
        controller = controller_factory(replace(short_settings, auto_start_breaks=True, auto_start_work=False))
        controller.start()
        scheduler.advance(60)
        assert controller.auto_start_pending is True

        getattr(controller, command)()
        scheduler.advance(5)

        assert controller.auto_start_pending is False
        assert controller.state.running is False

    def test_switch_mode_cancels_pending_auto_start(self, controller_factory, short_settings, scheduler):
        controller = controller_factory(replace(short_settings, auto_start_breaks=True))
        controller.start()
        scheduler.advance(60)

        controller.switch_mode(TimerMode.WORK)
        scheduler.advance(5)

        assert controller.state.mode == TimerMode.WORK
        assert controller.state.status == TimerStatus.READY

    def test_stale_auto_start_callback_is_ignored(self, controller_factory, short_settings, scheduler):
        controller = controller_factory(replace(short_settings, auto_start_breaks=True))
        controller.start()
        scheduler.advance(60)
        handle = scheduler.active[0]
        controller.reset()

        handle.callback()

        assert controller.state.status == TimerStatus.READY

    def test_full_auto_cycle(self, controller_factory, short_settings, scheduler):
        """With both auto-starts on the cycle runs unattended."""
        controller = controller_factory(replace(
            short_settings, auto_start_breaks=True, auto_start_work=True, sessions_before_long=2
        ))
        completions = []
        controller.add_work_session_listener(completions.append)
        controller.start()

        # work, short, work, long; each 60 ticks plus the 0.5s start delay
        scheduler.advance(60 + 0.5 + 60 + 0.5 + 60 + 0.5 + 60 + 0.5)

        assert len(completions) == 2
        assert controller.state.mode == TimerMode.WORK
        assert controller.state.current_session == 1
        assert controller.state.status == TimerStatus.RUNNING

    def test_shutdown_cancels_everything(self, controller_factory, short_settings, scheduler):
        controller = controller_factory(replace(short_settings, auto_start_breaks=True))
        controller.start()
        scheduler.advance(60)

        controller.shutdown()

        assert scheduler.active == []
        assert controller.auto_start_pending is False


class TestCollaborators:
    """Test effect delivery to notifier, sound and display."""

    def test_effects_delivered(self, controller_factory, settings):
        notifier = MagicMock()
        sound = MagicMock()
        display = MagicMock()
        controller = controller_factory(settings, notifier=notifier, sound=sound, display=display)

        controller.skip()

        sound.play_completion_chime.assert_called_once_with()
        notifier.notify.assert_called_once_with("Break time!", "Good job! Take a short break.")
        display.render_timer.assert_called_with(controller.state)

    def test_feedback_respects_settings(self, controller_factory, settings):
        notifier = MagicMock()
        sound = MagicMock()
        controller = controller_factory(
            replace(settings, sound_enabled=False, notifications_enabled=False),
            notifier=notifier, sound=sound
        )

        controller.skip()

        sound.play_completion_chime.assert_not_called()
        notifier.notify.assert_not_called()

    def test_collaborator_failures_do_not_stop_the_timer(self, controller_factory, settings):
        notifier = MagicMock()
        notifier.notify.side_effect = NotificationFailure("no notification daemon")
        sound = MagicMock()
        sound.play_completion_chime.side_effect = SoundFailure("no audio device")
        display = MagicMock()
        display.render_timer.side_effect = DisplayFailure("terminal closed")
        controller = controller_factory(settings, notifier=notifier, sound=sound, display=display)
        completions = []
        controller.add_work_session_listener(completions.append)

        controller.skip()

        assert controller.state.mode == TimerMode.SHORT_BREAK
        assert len(completions) == 1

    def test_failing_listener_does_not_block_others(self, controller_factory, settings):
        controller = controller_factory(settings)
        received = []

        def broken(event):
            raise RuntimeError("boom")

        controller.add_work_session_listener(broken)
        controller.add_work_session_listener(received.append)

        controller.skip()

        assert len(received) == 1

    def test_display_rendered_on_every_tick(self, controller_factory, settings, scheduler):
        display = MagicMock()
        controller = controller_factory(settings, display=display)
        controller.start()
        display.reset_mock()

        scheduler.advance(3)

        assert display.render_timer.call_count == 3
