"""
Structured logging setup for secrets-sync.

Uses structlog for JSON-formatted or console logging. Every event dict goes
through the redaction processor, and the stdlib loggers structlog writes to
are wrapped in a redacting proxy, so secrets are scrubbed even when the
process-wide output guard is not installed (tests, embedding).
"""
import logging
import sys
import traceback
from pathlib import Path
from typing import Any, Optional

import structlog

from secrets_sync.monitoring.redaction import RedactingLogger, make_redaction_processor
from secrets_sync.security.redactor import Scrubber


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "text",
    log_file: Optional[str] = None,
    scrubber: Optional[Scrubber] = None,
) -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG/INFO/WARNING/ERROR/CRITICAL)
        log_format: Format (json or text)
        log_file: Optional log file path
        scrubber: Redaction dependency; defaults to the process output guard
    """
    if scrubber is None:
        from secrets_sync.bootstrap import get_output_guard
        scrubber = get_output_guard()

    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level,
        force=True,
    )

    processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.contextvars.merge_contextvars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        # Last before rendering: sees every field, tracebacks included
        make_redaction_processor(scrubber),
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    stdlib_factory = structlog.stdlib.LoggerFactory(ignore_frame_names=[__name__])

    def logger_factory(*args: Any) -> RedactingLogger:
        return RedactingLogger(stdlib_factory(*args), scrubber)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=logger_factory,
        cache_logger_on_first_use=False,
    )

    if log_file:
        from logging.handlers import RotatingFileHandler

        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Rotating File Handler (10MB limit, 5 backups)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=10 * 1024 * 1024, # 10MB
            backupCount=5
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.root.addHandler(file_handler)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Structured logger instance
    """
    return structlog.get_logger(name)


def log_error(logger: Any, error: BaseException, **context: Any) -> None:
    """
    Log an exception with its type and traceback. All fields are redacted
    by the processor chain like any other event.
    """
    stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    logger.error(
        "Error occurred",
        error_message=str(error),
        error_type=type(error).__name__,
        stack=stack,
        **context,
    )
