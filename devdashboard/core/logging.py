"""structlog on top of stdlib logging, written to stderr.

Environment:
    DEVDASHBOARD_LOG_LEVEL   DEBUG | INFO | WARNING (default) | ERROR
    DEVDASHBOARD_LOG_FORMAT  console (default) | json

Report output goes to stdout, so log records never interleave with it.
"""

from __future__ import annotations

import logging
import logging.config
import os
from typing import Any

import structlog

DEFAULT_LEVEL = "WARNING"

# Third-party loggers that are noisy below WARNING.
_PINNED_LOGGERS = ("httpx", "httpcore")


def _pre_chain() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def _dict_config(level: str, log_format: str) -> dict[str, Any]:
    loggers: dict[str, Any] = {"devdashboard": {"level": level}}
    loggers.update({name: {"level": "WARNING"} for name in _PINNED_LOGGERS})
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": structlog.stdlib.ProcessorFormatter,
                "foreign_pre_chain": _pre_chain(),
                "processors": [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    _renderer(log_format),
                ],
            },
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": "structured",
            },
        },
        "root": {"handlers": ["stderr"], "level": level},
        "loggers": loggers,
    }


def setup_logging(level: str | None = None) -> None:
    """Configure logging once per process; *level* beats DEVDASHBOARD_LOG_LEVEL."""
    resolved = (level or os.environ.get("DEVDASHBOARD_LOG_LEVEL") or DEFAULT_LEVEL).upper()
    log_format = os.environ.get("DEVDASHBOARD_LOG_FORMAT", "console").lower()

    structlog.configure(
        processors=[*_pre_chain(), structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    logging.config.dictConfig(_dict_config(resolved, log_format))
