"""structlog configuration.

Log lines go to stderr so command output on stdout stays clean.
"""

from __future__ import annotations

import logging
import sys

import structlog

from serp.infrastructure.config import Settings


def configure_logging(settings: Settings) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        # Re-resolved per call: every CLI invocation may point stderr elsewhere.
        cache_logger_on_first_use=False,
    )
