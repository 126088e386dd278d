"""Structured logging: structlog events rendered through a rich console handler."""

import logging
from typing import Any, Dict, Optional

import structlog
from rich.logging import RichHandler

from job_board.config import Settings, settings


def configure_logging(app_settings: Optional[Settings] = None) -> None:
    """Route structlog through stdlib logging so RichHandler formats every event."""
    app_settings = app_settings or settings
    level = getattr(logging, app_settings.log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        datefmt="[%X]",
        level=level,
        handlers=[RichHandler(rich_tracebacks=True, markup=False, show_path=False)],
        force=True,
    )

    renderer = (
        structlog.dev.ConsoleRenderer(colors=False)
        if app_settings.debug
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)


def log_function_call(func_name: str, **kwargs: Any) -> Dict[str, Any]:
    """Log context for a service call; private and binary values are left out."""
    return {
        "function": func_name,
        "parameters": {
            k: v for k, v in kwargs.items()
            if not k.startswith("_") and not isinstance(v, (bytes, bytearray))
        },
    }
