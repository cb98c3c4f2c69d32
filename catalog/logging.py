"""structlog setup for the catalog service.

Events are emitted as key/value pairs (``log.info("product_created",
product_id=3)``) and rendered either for a terminal or as one JSON object per
line, chosen by ``CATALOG_OBSERVABILITY__LOG_FORMAT``.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, Optional

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from .config import Config


def _renderer(log_format: str) -> Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def setup_logging(level: str = "INFO", log_format: str = "console") -> None:
    """Route structlog to stdout, filtered at ``level``, rendered per ``log_format``."""
    threshold = logging.getLevelName(level.upper())
    # stdlib records (uvicorn, fastapi) share the stream and the threshold
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=threshold)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            _renderer(log_format),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_from(config: "Config") -> None:
    setup_logging(config.observability.log_level, config.observability.log_format)


def get_logger(name: Optional[str] = None, **initial_context: Any) -> structlog.BoundLogger:
    log = structlog.get_logger(name)
    return log.bind(**initial_context) if initial_context else log
