"""Opt-in log output for fetch-retry.

Library modules log through `structlog.get_logger(__name__)` and never set
up handlers. By default the `fetch_retry` logger only carries a NullHandler,
so a host application decides where retry notices go.

Callers without their own logging setup can opt in:

    from fetch_retry import configure_logging
    configure_logging("DEBUG")

This routes structlog events through stdlib logging and attaches one handler
to the `fetch_retry` logger. The root logger and other libraries' loggers
are left alone. structlog's configuration is process-wide, so applications
that already configure structlog should skip this and attach a handler to
`logging.getLogger("fetch_retry")` instead.
"""

import logging
import sys
from typing import Optional, TextIO

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from fetch_retry.config import Settings, get_settings

LIBRARY_LOGGER = "fetch_retry"


def add_library_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag events with the library name."""
    event_dict.setdefault("library", "fetch-retry")
    return event_dict


def _shared_processors(json_output: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_library_context,
    ]
    if json_output:
        processors.append(structlog.processors.format_exc_info)
    return processors


def _installed_handlers(library_logger: logging.Logger) -> list[logging.Handler]:
    return [h for h in library_logger.handlers if getattr(h, "_fetch_retry_handler", False)]


def configure_logging(
    log_level: Optional[str] = None,
    environment: Optional[str] = None,
    stream: Optional[TextIO] = None,
    settings: Optional[Settings] = None,
) -> logging.Handler:
    """Send fetch-retry log events to a stream.

    Args:
        log_level: Level for the `fetch_retry` logger (defaults to LOG_LEVEL)
        environment: "production" renders JSON lines, anything else renders
            console output (defaults to ENVIRONMENT)
        stream: Output stream, stdout when omitted
        settings: Settings snapshot used for the defaults above

    Returns:
        The handler attached to the `fetch_retry` logger. Calling again
        replaces it rather than adding a second one.
    """
    if log_level is None or environment is None:
        settings = settings or get_settings()
        log_level = log_level or settings.LOG_LEVEL
        environment = environment or settings.ENVIRONMENT

    level = getattr(logging, log_level.upper(), logging.INFO)
    json_output = environment.lower() == "production"
    shared = _shared_processors(json_output)

    structlog.configure(
        processors=[structlog.stdlib.filter_by_level]
        + shared
        + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=stream is None and sys.stdout.isatty())
    )
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared)
    )
    handler._fetch_retry_handler = True  # type: ignore[attr-defined]

    library_logger = logging.getLogger(LIBRARY_LOGGER)
    for previous in _installed_handlers(library_logger):
        library_logger.removeHandler(previous)
    library_logger.addHandler(handler)
    library_logger.setLevel(level)

    structlog.get_logger(__name__).debug(
        "Logging configured",
        log_level=log_level,
        renderer="json" if json_output else "console",
    )
    return handler
