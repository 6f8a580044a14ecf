"""
Validation error classifications for user input.

These exceptions reject malformed commands before any state is touched
or any write is attempted.
"""

from typing import Any, Optional, Dict


class ValidationError(ValueError):
    """Base class for rejected input. State is unchanged when raised."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.field = field
        self.value = value
        self.context = context or {}
        self.recoverable = True


class SettingsValidationError(ValidationError):
    """One or more settings values are non-numeric or below their minimum."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []


class TaskValidationError(ValidationError):
    """Task name is blank or the pomodoro estimate is invalid."""
