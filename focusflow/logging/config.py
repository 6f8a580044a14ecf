"""
Centralized logging configuration for the FocusFlow core.

This module provides standardized logging configuration using structlog
for all components. All logging throughout the package should use this
configuration to ensure consistent formatting and structured logging.
"""
import logging
import sys
from enum import Enum
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def render_enum_values(_logger: Any, _method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Log timer modes and triggers by their wire value rather than their repr."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    # Log output goes to stderr so it never interleaves with the console display.
    # The CLI reconfigures on every invocation, so replace any earlier handler.
    logging.basicConfig(
        level=log_level,
        stream=sys.stderr,
        format="%(message)s",
        force=True
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        render_enum_values,
    ]

    if include_timestamp:
        # Local time, matching the local calendar days used for statistics
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=False))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_timer_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger bound for timer state machine events.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger for phase transitions
    """
    return get_logger(name).bind(subsystem="timer")


def log_phase_transition(
    logger: FilteringBoundLogger,
    from_mode: str,
    to_mode: str,
    trigger: str,
    session_index: int,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a timer phase transition with standardized format.

    Args:
        logger: Structlog logger instance
        from_mode: Mode of the phase that just ended
        to_mode: Mode of the next phase
        trigger: What ended the phase ("expired" or "skipped")
        session_index: Session index after the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        from_mode=from_mode,
        to_mode=to_mode,
        trigger=trigger,
        session_index=session_index,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("Phase transition")
