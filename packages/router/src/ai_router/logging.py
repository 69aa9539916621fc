"""
Structured logging for the task router.

Router modules log through ``get_logger(__name__)`` and never configure
logging themselves. A host process (or ``QLearningRouter.from_settings``
with ``setup_logging=True``) calls ``configure_logging`` once; events from
plain ``logging`` loggers go through the same renderer.
"""

import logging
import sys

import structlog
from structlog.types import Processor

from .exceptions import InvalidConfigError

LOG_FORMATS = ("json", "console")


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    service_name: str = "ai-router",
) -> None:
    """
    Route structlog and stdlib logging through one stdout handler.

    Args:
        log_level: Minimum level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for machine-readable lines, "console" for humans
        service_name: Bound as ``service`` on every event

    Raises:
        InvalidConfigError: If the level or format is not recognised
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise InvalidConfigError("Unknown log level", context={"log_level": log_level})
    if log_format not in LOG_FORMATS:
        raise InvalidConfigError("Unknown log format", context={"log_format": log_format})

    shared: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    structlog.configure(
        processors=[
            *shared,
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=service_name)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
            foreign_pre_chain=shared,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
