"""
Logging utilities for mirroring toolkit logs into a UI console queue.

The toolkit itself only logs through module-level ``logging`` loggers; a
caller that shows a console attaches a QueueLogHandler (or wraps a block
in ``capture_logs``) and drains ``LogLine`` entries on its own event loop.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from queue import Empty, Queue
from typing import Iterator, List, NamedTuple, Optional

PACKAGE_LOGGER = "qbank_toolkit"

# A console renders three styles only
_CONSOLE_LEVELS = {"DEBUG": "INFO", "CRITICAL": "ERROR"}


class LogLine(NamedTuple):
    """One console line: rendered message, console level, toolkit module."""
    message: str
    level: str
    source: str


def _source_of(logger_name: str) -> str:
    """Module path relative to the package, e.g. "storage.store"."""
    prefix = PACKAGE_LOGGER + "."
    if logger_name.startswith(prefix):
        return logger_name[len(prefix):]
    return logger_name


class QueueLogHandler(logging.Handler):
    """
    A logging handler that puts LogLine entries on a queue.

    DEBUG is shown as INFO and CRITICAL as ERROR.
    """

    def __init__(self, log_queue: Queue, level: int = logging.INFO):
        super().__init__(level)
        self.log_queue = log_queue
        self.setFormatter(logging.Formatter("%(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = _CONSOLE_LEVELS.get(record.levelname, record.levelname)
            self.log_queue.put(LogLine(self.format(record), level, _source_of(record.name)))
        except Exception:
            self.handleError(record)


def attach_queue_handler(
    log_queue: Queue,
    level: int = logging.INFO,
    logger_name: Optional[str] = PACKAGE_LOGGER,
) -> QueueLogHandler:
    """
    Forward toolkit log records at ``level`` and above to ``log_queue``.

    The logger's own level is lowered to ``level`` when it would
    otherwise filter those records out.

    Returns:
        The attached handler, for detach_queue_handler()
    """
    logger = logging.getLogger(logger_name)
    handler = QueueLogHandler(log_queue, level)
    logger.addHandler(handler)
    if logger.getEffectiveLevel() > level:
        logger.setLevel(level)
    return handler


def detach_queue_handler(
    handler: QueueLogHandler,
    logger_name: Optional[str] = PACKAGE_LOGGER,
) -> None:
    logging.getLogger(logger_name).removeHandler(handler)


@contextmanager
def capture_logs(log_queue: Queue, level: int = logging.INFO) -> Iterator[Queue]:
    """
    Mirror toolkit logs into ``log_queue`` for the duration of a block.

    Example:
        >>> with capture_logs(Queue()) as lines:
        ...     library.auto_tag(rule)
        >>> drain_queue(lines)[-1].message
        "Auto-tag 'B.4' via ['waves']: tagged 3 questions"
    """
    handler = attach_queue_handler(log_queue, level)
    try:
        yield log_queue
    finally:
        detach_queue_handler(handler)


def drain_queue(log_queue: Queue) -> List[LogLine]:
    """Pop every pending LogLine without blocking."""
    drained: List[LogLine] = []
    while True:
        try:
            drained.append(log_queue.get_nowait())
        except Empty:
            return drained
