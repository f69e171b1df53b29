"""
log_setup.py
------------
structlog configuration.  Call ``configure_logging`` once at start-up; every
module logs through ``structlog.get_logger(__name__)`` with dotted event
names and key/value context, e.g.::

    logger.debug("analytics.metrics_computed", trades=42)

Both structlog and plain stdlib records go through the same processor chain
so third-party log lines render identically.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from config import LOG_FORMATS, LOG_LEVELS, AnalyticsConfig
from errors import ConfigError


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def configure_logging(level: str = "INFO", fmt: str = "console") -> None:
    """Route structlog through stdlib logging with a console or JSON renderer.

    Parameters
    ----------
    level : str
        Minimum level name (``DEBUG`` .. ``CRITICAL``).
    fmt : str
        ``console`` for human-readable lines, ``json`` for one JSON object
        per line.
    """
    if level not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {LOG_LEVELS}")
    if fmt not in LOG_FORMATS:
        raise ConfigError(f"log_format must be one of {LOG_FORMATS}")

    shared = _shared_processors()

    renderer: Any
    if fmt == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=shared,
        )
    )
    logging.basicConfig(level=getattr(logging, level), handlers=[handler], force=True)

    processors = list(shared)
    if fmt == "json":
        # ConsoleRenderer formats exceptions itself
        processors.append(structlog.processors.format_exc_info)
    processors.append(structlog.stdlib.ProcessorFormatter.wrap_for_formatter)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_from(config: AnalyticsConfig) -> None:
    """Shortcut for ``configure_logging(config.log_level, config.log_format)``."""
    configure_logging(config.log_level, config.log_format)
