"""
Logging Setup - Assessment Scoring Engine
assessment_scoring/core/logging.py

Configures stdlib logging and structlog from LOG_LEVEL / LOG_FORMAT.
"""

import logging
import sys
from typing import Optional

import structlog

from assessment_scoring.config import settings

_configured = False


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Configure logging once per process. Later calls are no-ops."""
    global _configured
    if _configured:
        return

    level = level or settings.LOG_LEVEL
    fmt = fmt or settings.LOG_FORMAT

    logging.basicConfig(
        level=level,
        stream=sys.stdout,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level)
        ),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configured = True
