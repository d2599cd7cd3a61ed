"""
Logging — structlog output for the `harvest` logger tree.

Only the `harvest` stdlib logger is touched; the application's root
handlers stay as they are.

    import harvest

    harvest.configure_logging("DEBUG")             # console, fetches/dedup/invalidation
    harvest.configure_logging("INFO", json=True)   # JSON lines
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

_HANDLER_NAME = "harvest.structlog"

_PRE_CHAIN: list[structlog.types.Processor] = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
]


def configure_logging(
    level: int | str = logging.WARNING,
    *,
    json: bool = False,
    stream: TextIO | None = None,
) -> logging.Handler:
    """
    Route harvest's structlog events to stream (stderr by default).

    Calling it again replaces the previous harvest handler. Returns the
    installed handler.
    """
    stream = stream or sys.stderr
    if json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            *_PRE_CHAIN,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_PRE_CHAIN,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    logger = logging.getLogger("harvest")
    for existing in tuple(logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return handler


__all__ = ("configure_logging",)
