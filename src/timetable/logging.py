"""Structured logging for the composer, built on structlog.

Console output while editing locally, JSON lines when ``LOG_JSON`` is set.
Everything goes to stderr: the CLI prints the save payload on stdout and
must be able to pipe it untouched.

Session-wide fields (school, section) are bound once through contextvars
and then appear on every event without being passed at each call site.
"""

import logging
import sys

import structlog


def setup_logging(json_output: bool = False, log_level: str = "INFO") -> None:
    """Configure structlog and route stdlib loggers to the same stream.

    Args:
        json_output: Render JSON lines instead of the coloured console format.
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    # requests/urllib3 retry and connection warnings
    root = logging.getLogger()
    root.handlers = [logging.StreamHandler(sys.stderr)]
    root.setLevel(level)


def bind_session_context(**values: object) -> None:
    """Attach fields to every subsequent event; ``None`` values unbind the key."""
    unbind = [key for key, value in values.items() if value is None]
    if unbind:
        structlog.contextvars.unbind_contextvars(*unbind)
    bound = {key: value for key, value in values.items() if value is not None}
    if bound:
        structlog.contextvars.bind_contextvars(**bound)


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger for a module; call as ``get_logger(__name__)``."""
    return structlog.get_logger(name)
