"""Centralized logging configuration for the photo resizer."""

import os
import sys
import logging
import threading
from typing import Optional

ROOT_LOGGER_NAME = "photo-resizer"

STRUCTURED_FORMAT = (
    "%(asctime)s | %(name)s | %(levelname)-8s | "
    "%(filename)s:%(lineno)d | %(funcName)s() | %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: Optional[str]) -> int:
    name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    return getattr(logging, name, logging.INFO)


def _build_formatter(format_type: str) -> logging.Formatter:
    """Formatter for ``format_type``, overridden by ``LOG_FORMAT`` when set."""
    if os.getenv("LOG_FORMAT", format_type).lower() == "structured":
        return logging.Formatter(STRUCTURED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    return logging.Formatter(SIMPLE_FORMAT)


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Optional[str] = None,
    format_type: str = "structured",
) -> logging.Logger:
    """
    Configure a stdout logger with level and format taken from the environment.

    Args:
        name: Logger name (defaults to "photo-resizer")
        level: Log level override (defaults to LOG_LEVEL or INFO)
        format_type: "structured" or "simple"; LOG_FORMAT takes precedence

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level(level))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(_build_formatter(format_type))
        logger.addHandler(handler)

    logger.propagate = False
    return logger


def get_logger(component: Optional[str] = None) -> logging.Logger:
    """
    Get the logger of one resizer component.

    Component names are placed under the ``photo-resizer`` namespace, so
    ``get_logger("codec")`` is ``photo-resizer.codec``. Names already in the
    namespace are used as given.
    """
    if not component or component == ROOT_LOGGER_NAME:
        return setup_logger(ROOT_LOGGER_NAME)
    if component.startswith(ROOT_LOGGER_NAME + "."):
        return setup_logger(component)
    return setup_logger(f"{ROOT_LOGGER_NAME}.{component}")


def configure_worker_logging() -> logging.Logger:
    """
    Configure a per-thread logger for invocations offloaded to a worker.

    Call this at the top of code that runs inside ``asyncio.to_thread`` so
    that interleaved invocations can be told apart in the output.
    """
    return get_logger(threading.current_thread().name)


logger = setup_logger()
