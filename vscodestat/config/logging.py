"""
Logging Configuration

Structured logging through structlog, rendered by the stdlib root logger
on stderr; stdout carries the collected statistics.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.stdlib import ProcessorFormatter

from vscodestat.config.settings import MonitoringSettings


def configure_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structured logging for the collector.

    Only the logging section of the settings is read, so logging can be set
    up before the remaining configuration has been validated.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        log_format: Override log format (json or text)
    """
    monitoring = MonitoringSettings()
    level = (log_level or monitoring.log_level).upper()
    fmt = log_format or monitoring.log_format

    shared_processors = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    structlog.configure(
        processors=shared_processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ProcessorFormatter(processor=renderer, foreign_pre_chain=shared_processors)
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(getattr(logging, level, logging.INFO))
