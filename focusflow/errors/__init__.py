"""
Error classification for the FocusFlow core.

Validation errors are raised synchronously at the boundary and leave state
unchanged. Collaborator failures (storage, notifications, sound, display)
are always handled inside the core and never interrupt the timer.
"""

from .validation import (
    ValidationError,
    SettingsValidationError,
    TaskValidationError,
)
from .collaborator_failures import (
    CollaboratorFailure,
    StorageFailure,
    NotificationFailure,
    SoundFailure,
    DisplayFailure,
)

__all__ = [
    # Validation Errors
    "ValidationError",
    "SettingsValidationError",
    "TaskValidationError",
    # Collaborator Failures
    "CollaboratorFailure",
    "StorageFailure",
    "NotificationFailure",
    "SoundFailure",
    "DisplayFailure",
]
