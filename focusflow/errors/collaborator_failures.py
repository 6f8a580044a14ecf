"""
Failure classifications for external collaborators.

None of these are fatal: the core logs them and carries on with its
in-memory state.
"""

from typing import Optional, Dict, Any


class CollaboratorFailure(Exception):
    """Base class for failures raised by injected collaborators."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class StorageFailure(CollaboratorFailure):
    """Read, write or delete of a persisted key failed."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 key: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.key = key


class NotificationFailure(CollaboratorFailure):
    """Desktop notification could not be delivered."""


class SoundFailure(CollaboratorFailure):
    """Completion chime could not be played."""


class DisplayFailure(CollaboratorFailure):
    """Display sink failed to render a snapshot."""
