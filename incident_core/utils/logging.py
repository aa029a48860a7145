"""Structured logging using structlog, with optional file rotation."""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

import structlog


def _rotating_handler(log_dir: str, filename: str, max_bytes: int, backup_count: int) -> RotatingFileHandler:
    os.makedirs(log_dir, exist_ok=True)
    return RotatingFileHandler(
        os.path.join(log_dir, filename),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )


def setup_logging(
    debug: bool = False,
    log_dir: Optional[str] = "logs",
    log_max_bytes: int = 10_000_000,
    log_backup_count: int = 5,
    log_file: str = "incidents.log",
) -> None:
    """Configure structlog and the stdlib root logger.

    Debug mode renders human-readable console lines; otherwise every event
    is a JSON object. Output always goes to stdout, and additionally to a
    rotating file under ``log_dir`` when one is given.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    renderer = structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    file_error = None
    if log_dir:
        try:
            handlers.append(_rotating_handler(log_dir, log_file, log_max_bytes, log_backup_count))
        except OSError as exc:
            file_error = exc

    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)

    if file_error is not None:
        get_logger("utils.logging").warning(
            "log_file_unavailable", log_dir=log_dir, error=str(file_error)
        )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a named structured logger."""
    return structlog.get_logger(name)
