"""
Logging setup for the CLI and API, plus a queue handler so a hosting
process can display engine logs.
"""
from __future__ import annotations

import logging
from queue import Queue
from typing import Optional, Union

DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO, fmt: str = DEFAULT_FORMAT) -> None:
    """
    Configure root logging for command-line and server use.

    Args:
        level: Logging level or its name ("DEBUG", "INFO", ...)
        fmt: Record format
    """
    if isinstance(level, str):
        name = level
        level = logging.getLevelName(name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name}")
    logging.basicConfig(level=level, format=fmt)
    logging.getLogger("pattern_toolkit").setLevel(level)


class QueueLogHandler(logging.Handler):
    """
    A logging handler that sends (message, level) pairs to a queue.

    Used to capture engine logs and display them in a host UI.
    """

    def __init__(self, log_queue: Queue, level: int = logging.INFO):
        super().__init__(level)
        self.log_queue = log_queue
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            self.log_queue.put((message, record.levelname))
        except Exception:
            self.handleError(record)


def attach_queue_handler(log_queue: Queue, logger_name: Optional[str] = "pattern_toolkit") -> QueueLogHandler:
    """
    Attach a QueueLogHandler to the specified logger.

    Returns:
        The attached handler (for later removal).
    """
    handler = QueueLogHandler(log_queue)
    logging.getLogger(logger_name).addHandler(handler)
    return handler


def detach_queue_handler(handler: QueueLogHandler, logger_name: Optional[str] = "pattern_toolkit") -> None:
    """Remove a QueueLogHandler from the specified logger."""
    logging.getLogger(logger_name).removeHandler(handler)
