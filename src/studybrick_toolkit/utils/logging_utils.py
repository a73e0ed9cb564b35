"""
Logging utilities: console setup for the CLI, and a queue handler that
lets a front end show the engine's log lines next to its notices.

A session started with a ``log_queue`` receives every record logged under
the ``studybrick_toolkit`` package while it is open.
"""
from __future__ import annotations

import logging
from queue import Queue
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
PACKAGE_LOGGER = "studybrick_toolkit"

# Levels a front end renders; anything below INFO is shown as INFO
DISPLAY_LEVELS = ("INFO", "WARNING", "ERROR", "CRITICAL")


class QueueLogHandler(logging.Handler):
    """Puts each record on ``log_queue`` as a ``(message, level)`` tuple."""

    def __init__(self, log_queue: Queue, level: int = logging.INFO):
        super().__init__(level)
        self.log_queue = log_queue
        self.previous_level = logging.NOTSET
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = record.levelname if record.levelname in DISPLAY_LEVELS else "INFO"
            self.log_queue.put((self.format(record), level))
        except Exception:
            self.handleError(record)


def attach_queue_handler(
    log_queue: Queue,
    logger_name: Optional[str] = PACKAGE_LOGGER,
    level: int = logging.INFO,
) -> QueueLogHandler:
    """
    Start forwarding records from ``logger_name`` to ``log_queue``.

    The logger is opened up to ``level`` if it is set stricter; the
    previous level comes back on detach.

    Returns:
        The handler, for detach_queue_handler()
    """
    logger = logging.getLogger(logger_name)
    handler = QueueLogHandler(log_queue, level)
    handler.previous_level = logger.level
    if logger.getEffectiveLevel() > level:
        logger.setLevel(level)
    logger.addHandler(handler)
    return handler


def detach_queue_handler(handler: QueueLogHandler, logger_name: Optional[str] = PACKAGE_LOGGER) -> None:
    logger = logging.getLogger(logger_name)
    logger.removeHandler(handler)
    logger.setLevel(handler.previous_level)


def configure_logging(verbose: bool = False) -> None:
    """
    Configure root logging for command-line use.

    Args:
        verbose: DEBUG level when True, INFO otherwise.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    # Pillow's plugin loader is chatty at DEBUG
    logging.getLogger("PIL").setLevel(logging.INFO)
