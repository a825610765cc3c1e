"""Structured logging configuration for webreplay.

Provides:
- Structured logging with structlog
- Context-aware logging (session id bound for a whole run)
- Per-event playback progress logging
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Optional

import structlog


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    include_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Output logs as JSON
        include_timestamp: Include timestamps in logs
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
        force=True,
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso") if include_timestamp else structlog.processors.TimeStamper(fmt=None),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None, **context) -> structlog.BoundLogger:
    """Get a configured logger with optional context.

    Args:
        name: Logger name
        **context: Additional context to bind

    Returns:
        Configured structlog logger
    """
    logger = structlog.get_logger(name)
    if context:
        logger = logger.bind(**context)
    return logger


class LogContext:
    """Context manager for scoped logging context.

    Usage:
        with LogContext(session_id="1750718332829"):
            logger.info("Playing interaction")
            # All logs within this block have session_id bound
    """

    def __init__(self, **context):
        self.context = context
        self._tokens: Optional[dict] = None

    def __enter__(self) -> "LogContext":
        self._tokens = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._tokens:
            structlog.contextvars.reset_contextvars(**self._tokens)
            self._tokens = None


@contextmanager
def log_operation(
    operation: str,
    logger: Optional[structlog.BoundLogger] = None,
    **context,
):
    """Context manager for logging operation start/end.

    Args:
        operation: Name of the operation
        logger: Optional logger to use
        **context: Additional context

    Yields:
        Dict to store operation results

    Example:
        with log_operation("load_recording", path=path) as op:
            recording = store.load(path)
            op["interactions"] = len(recording)
    """
    log = logger or get_logger()
    log = log.bind(operation=operation, **context)

    log.info(f"{operation} started")
    result: dict[str, Any] = {"success": False, "error": None}

    try:
        yield result
        result["success"] = True
        log.info(f"{operation} completed", **result)
    except Exception as e:
        result["error"] = str(e)
        log.error(f"{operation} failed", **result)
        raise


class PlaybackLogger:
    """Logger specialized for playback progress.

    Every line carries the event index (1-based, as shown to users), the
    total and the interaction kind so that any recovered error can be
    traced back to one event of the log.
    """

    def __init__(self, session_id: str, total: int):
        self.log = get_logger().bind(component="playback", session_id=session_id)
        self.total = total

    def playback_started(self, speed: float, interactions: int) -> None:
        self.log.info(
            "Starting playback",
            interactions=interactions,
            total=self.total,
            speed=speed,
        )

    def event_started(self, index: int, kind: str, url: Optional[str]) -> None:
        self.log.info(
            "Playing interaction",
            index=index + 1,
            total=self.total,
            kind=kind,
            url=url,
        )

    def event_failed(self, index: int, kind: str, error: str) -> None:
        self.log.error(
            "Error playing interaction",
            index=index + 1,
            kind=kind,
            error=error,
        )

    def playback_stopped(self, attempted: int) -> None:
        self.log.warning("Playback stopped early", attempted=attempted, total=self.total)

    def playback_completed(self, attempted: int, fallbacks: int, skipped: int, failed: int) -> None:
        self.log.info(
            "Playback completed",
            attempted=attempted,
            total=self.total,
            fallbacks=fallbacks,
            skipped=skipped,
            failed=failed,
        )
