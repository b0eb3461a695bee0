"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging.config
import sys
from pathlib import Path

import structlog

LOGGER_NAME = "warc_urls"

_LOGGING_INITIALISED = False


def configure_logging(verbose: bool = False, log_file: Path | None = None) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return application logger.

    Everything goes to stderr (and optionally ``log_file``); stdout carries
    only extracted URIs.
    """

    global _LOGGING_INITIALISED

    if not _LOGGING_INITIALISED:
        level = "DEBUG" if verbose else "INFO"
        handlers: dict[str, dict] = {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "plain",
                "stream": "ext://sys.stderr",
            },
        }
        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers["run_file"] = {
                "class": "logging.FileHandler",
                "level": level,
                "filename": str(log_file),
                "encoding": "utf-8",
                "formatter": "plain",
            }
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "plain": {
                        "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": handlers,
                "loggers": {
                    LOGGER_NAME: {
                        "handlers": list(handlers),
                        "level": level,
                        "propagate": False,
                    },
                },
            }
        )

        # Forward structlog events to stdlib; JSON rendering happens in the handler formatter
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    return structlog.get_logger(LOGGER_NAME)


def component_logger(component: str, **context: object) -> structlog.BoundLogger:
    """Return the application logger bound to a pipeline component.

    Until something configures structlog, events go to stderr instead of
    structlog's default stdout printer, which would mix with extracted URIs.
    """

    if structlog.is_configured():
        logger = structlog.get_logger(LOGGER_NAME)
    else:
        logger = structlog.wrap_logger(structlog.PrintLogger(sys.stderr))
    return logger.bind(component=component, **context)


__all__ = ["LOGGER_NAME", "component_logger", "configure_logging"]
