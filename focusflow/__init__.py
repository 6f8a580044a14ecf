"""
FocusFlow - Focus Timer and Task Tracker Core

Session state machine and statistics engine for a pomodoro-style focus
timer. Tracks work/break phase transitions, attributes completed work
sessions to the active task, and keeps per-day statistics and a
consecutive-day streak.
"""

__version__ = "0.1.0"
__author__ = "FocusFlow Team"
