"""
Logging configuration and utilities for the FocusFlow core.
"""
from .config import configure_logging, get_logger, get_timer_logger, log_phase_transition

__all__ = ["configure_logging", "get_logger", "get_timer_logger", "log_phase_transition"]
