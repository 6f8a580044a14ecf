"""
Utility functions module.

Clock and scheduling primitives shared across the system.

Time Semantics:
- Day keys are local calendar dates (YYYY-MM-DD), never 24h windows
- Timer progression is driven by ticks, not by measuring elapsed time
- Every scheduled callback returns a handle that can be cancelled
"""
