"""structlog setup for the API process and its background sweeps.

Rendering follows the terminal: a colored console renderer when stdout is a
TTY or FORCE_COLOR is set (containers without a TTY), JSON lines otherwise.
"""

import logging
import os
import sys

import structlog

_TRUTHY = ("1", "true", "yes")


def _wants_color() -> bool:
    if os.environ.get("FORCE_COLOR", "").lower() in _TRUTHY:
        return True
    return sys.stdout.isatty()


def _renderers(use_colors: bool) -> list[structlog.types.Processor]:
    if use_colors:
        return [structlog.dev.ConsoleRenderer(colors=True)]
    return [
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(level: str = "INFO", app_name: str | None = None) -> None:
    """Configure structlog for the process.

    Args:
        level: Minimum level name to emit (DEBUG, INFO, WARNING, ERROR)
        app_name: Bound as ``app`` on every event when given
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            *_renderers(_wants_color()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping()[level.upper()]
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.clear_contextvars()
    if app_name:
        structlog.contextvars.bind_contextvars(app=app_name)
