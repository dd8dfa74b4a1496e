"""Structured logging configuration using structlog.

The host process calls configure_logging() once at startup with its
Settings. LOG_LEVEL sets the root level, ENVIRONMENT picks the renderer
(JSON lines in production, colored console otherwise) and every event is
stamped with APP_NAME / APP_VERSION.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from llm_orchestration.config import Settings, settings as default_settings


# HTTP client internals; vendor calls are logged by the clients themselves
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


class AppContext:
    """Processor stamping the application name and version on every event."""

    def __init__(self, app_name: str, app_version: str):
        self.app_name = app_name
        self.app_version = app_version

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", self.app_name)
        event_dict.setdefault("version", self.app_version)
        return event_dict


def build_processors(settings: Settings) -> list[Processor]:
    """Processors shared by structlog events and foreign stdlib records."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        AppContext(settings.APP_NAME, settings.APP_VERSION),
    ]
    if is_production(settings):
        processors.append(structlog.processors.format_exc_info)
    return processors


def is_production(settings: Settings) -> bool:
    return settings.ENVIRONMENT.lower() == "production"


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Configure structlog on top of stdlib logging.

    Args:
        settings: Source of LOG_LEVEL, ENVIRONMENT, APP_NAME and APP_VERSION
            (default: process settings)

    Replaces any handler already on the root logger. Bound loggers are
    cached after first use in production only, so development sessions
    (and tests) can reconfigure.
    """
    settings = settings or default_settings
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    shared_processors = build_processors(settings)
    production = is_production(settings)
    renderer: Processor = (
        structlog.processors.JSONRenderer() if production else structlog.dev.ConsoleRenderer(colors=True)
    )

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=production,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors)
    )
    handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.get_logger(__name__).info(
        "Logging configured",
        log_level=logging.getLevelName(level),
        environment=settings.ENVIRONMENT,
        renderer="json" if production else "console",
    )
