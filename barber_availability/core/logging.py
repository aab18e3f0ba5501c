import logging
from typing import Optional

import structlog

from barber_availability.core.config import settings


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """Configure structlog for the engine.

    Defaults come from ``settings.LOG_LEVEL`` and ``settings.LOG_JSON``.
    """
    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    use_json = settings.LOG_JSON if json_output is None else json_output
    renderer = (
        structlog.processors.JSONRenderer()
        if use_json
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )
