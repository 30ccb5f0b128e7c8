"""Structured logging configuration using structlog.

tatami itself only logs at debug level (schema construction, form data
parsing, failed validate_or_raise calls). Applications that don't configure
structlog themselves can call configure_logging once at startup; without
arguments it follows TATAMI_LOG_LEVEL and TATAMI_ENVIRONMENT.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from .config import get_settings


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Tag events with the library name unless the caller set ``app``."""
    event_dict.setdefault("app", "tatami")
    return event_dict


def _shared_processors(is_production: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]
    if is_production:
        processors.append(structlog.processors.format_exc_info)
    return processors


def _renderer(is_production: bool) -> Processor:
    if is_production:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: str | None = None, environment: str | None = None) -> None:
    """Configure structlog on top of the stdlib root logger.

    Args:
        log_level: Logging level name (default: Settings.LOG_LEVEL); unknown
            names fall back to INFO
        environment: "production" for JSON output, anything else for the
            console renderer (default: Settings.ENVIRONMENT)
    """
    settings = get_settings()
    log_level = log_level or settings.LOG_LEVEL
    environment = environment or settings.ENVIRONMENT

    level = getattr(logging, log_level.upper(), logging.INFO)
    is_production = environment.lower() == "production"
    processors = _shared_processors(is_production)

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=_renderer(is_production),
            foreign_pre_chain=processors,
        )
    )
    handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    structlog.get_logger(__name__).debug(
        "Logging configured",
        log_level=log_level,
        environment=environment,
        renderer="json" if is_production else "console",
    )
