"""Structured logging for the Smart Laundry tracker.

structlog renders every event and hands the line to stdlib logging, so
structlog, uvicorn and SQLAlchemy output share the same handlers.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Iterator

import structlog

from smart_laundry.enterprise.config.settings import LoggingSettings

_NOISY_LOGGERS = ("sqlalchemy.engine", "uvicorn.access")


def _processors(json_output: bool) -> list[structlog.types.Processor]:
    chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    chain.append(structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False))
    return chain


def configure_logging(settings: LoggingSettings) -> None:
    """Configure stdlib + structlog logging based on settings."""

    level = getattr(logging, settings.level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    if level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=_processors(settings.json),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


@contextmanager
def machine_context(machine_id: str) -> Iterator[None]:
    """Attach ``machine_id`` to every log event emitted inside the block."""

    with structlog.contextvars.bound_contextvars(machine_id=machine_id):
        yield
