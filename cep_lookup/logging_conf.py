"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config

import structlog

_LOGGING_INITIALISED = False


def configure_logging(verbose: bool = False) -> structlog.BoundLogger:
    """Configure structlog + stdlib console handler and return application logger.

    Events go to stderr as JSON lines so stdout stays reserved for lookup
    output. Nothing is written to disk.
    """

    global _LOGGING_INITIALISED
    level = "DEBUG" if verbose else "WARNING"
    if not _LOGGING_INITIALISED:
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "json": {
                        "()": "pythonjsonlogger.json.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "stream": "ext://sys.stderr",
                        "formatter": "json",
                    },
                },
                "loggers": {
                    "cep_lookup": {
                        "handlers": ["console"],
                        "level": level,
                        "propagate": False,
                    },
                },
            }
        )

        # Event dict keys become JSON fields through the stdlib `extra` mapping
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso", key="ts"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.render_to_log_kwargs,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    else:
        logging.getLogger("cep_lookup").setLevel(level)
    return structlog.get_logger("cep_lookup")


__all__ = ["configure_logging"]
