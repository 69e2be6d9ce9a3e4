"""
Logging Configuration - Shared Layer

Bridges structlog onto the standard library root logger so that both
structured events (``logger.info("fetch.cycle.completed", location=...)``)
and third-party ``logging`` records share one formatter and one set of
handlers.
"""

import logging
import os
import sys
from typing import Any, List, Optional

import structlog
from structlog.types import Processor

from weather_aggregator.shared.consts import EnumEnvironment, EnumLogFormat

# Libraries that log every request at INFO; we only want their warnings.
_CHATTY_LOGGERS = ("httpx", "httpcore")


def _shared_processors() -> List[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _select_renderer(environment: str, log_format: str) -> Processor:
    if log_format == EnumLogFormat.JSON.value:
        return structlog.processors.JSONRenderer()
    if log_format == EnumLogFormat.CONSOLE.value:
        return structlog.dev.ConsoleRenderer()
    if environment.lower() == EnumEnvironment.PRODUCTION.value:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def configure_logging(
    level: Optional[str] = None,
    log_format: Optional[str] = None,
    file_path: Optional[str] = None,
    environment: str = "development",
) -> None:
    """
    Configure stdlib logging and structlog.

    Called once at import time of the entry points, before settings exist,
    so it falls back to ``LOG_LEVEL`` / ``LOG_FORMAT`` / ``LOG_FILE_PATH``
    from the environment. ``update_logging_from_settings`` re-runs it
    afterwards.

    Args:
        level: Log level name; defaults to ``LOG_LEVEL`` or INFO.
        log_format: ``json``, ``console`` or ``auto``. ``auto`` renders JSON
            in production and console output elsewhere.
        file_path: Optional file to mirror console output into.
        environment: Used by ``auto`` to pick the renderer.
    """
    log_level = level or os.environ.get("LOG_LEVEL") or "INFO"
    log_file = file_path or os.environ.get("LOG_FILE_PATH")
    renderer_name = (
        log_format or os.environ.get("LOG_FORMAT") or EnumLogFormat.AUTO.value
    ).lower()
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=_select_renderer(environment, renderer_name),
        foreign_pre_chain=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        ],
    )
    for handler in handlers:
        handler.setFormatter(formatter)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.handlers = handlers
    root_logger.setLevel(numeric_level)

    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    logging.getLogger(__name__).debug(
        "Logging configured with level %s (file=%s)", log_level, log_file
    )


def update_logging_from_settings(settings: Any) -> None:
    """
    Re-apply logging configuration from the loaded application settings.

    Args:
        settings: ``AppSettings`` (or any object exposing ``logging`` and
            ``environment`` the same way).
    """
    try:
        level = getattr(settings.logging.level, "value", settings.logging.level)
        log_format = getattr(settings.logging.format, "value", settings.logging.format)
        environment = getattr(
            settings.environment, "value", settings.environment
        )
        configure_logging(
            level=level,
            log_format=log_format,
            file_path=settings.logging.file_path,
            environment=environment,
        )
    except AttributeError as exc:
        logging.error("Failed to update logging from settings: %s", exc)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger configured for the project."""
    return structlog.get_logger(name)
