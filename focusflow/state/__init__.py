"""
Timer state machine and runtime module.

Manages the work/short-break/long-break cycle: immutable timer state,
pure transitions with explicit effects, and the runtime controller that
drives ticks and deferred auto-starts.
"""
