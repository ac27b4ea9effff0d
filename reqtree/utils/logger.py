"""
Logging setup for reqtree.

Every module logs through a child of the "reqtree" logger, so one call
to setup_logging() decides level, format and destinations for the whole
package. Console output goes to stderr; stdout carries the JSON result.
"""

import logging
import sys
import time
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "reqtree"
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    log_file: Optional[Path | str] = None,
    console: bool = True,
) -> None:
    """
    (Re)configure the package logger, replacing any handlers it has.

    Args:
        level: Level name; unknown names fall back to INFO
        format_string: Record format (DEFAULT_FORMAT if None)
        log_file: Also append records to this file, creating its directory
        console: Write records to stderr
    """
    global _configured

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    package_logger.handlers.clear()

    handlers = []
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a module, nested under the package logger.

    Names outside the package ("scripts.scrape") are prefixed with
    "reqtree." so their records reach the configured handlers.
    """
    if not _configured:
        setup_logging()

    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


class LogContext:
    """
    Log the start and the outcome of one unit of work.

    Example:
        with LogContext(logger, "Resolving block", block_id="U-MAJOR-201-BS"):
            resolver.parse_block_detailed(block_id, block)
    """

    def __init__(self, logger: logging.Logger, operation: str, **context):
        self.logger = logger
        self.operation = operation
        self.context = context
        self._started = 0.0

    def __enter__(self):
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        self.logger.info(f"Starting: {self.operation} ({details})")
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - self._started
        if exc_type is None:
            self.logger.info(f"Completed: {self.operation} ({elapsed:.2f}s)")
        else:
            self.logger.error(f"Failed: {self.operation} ({elapsed:.2f}s) - {exc_type.__name__}: {exc_val}")
        return False


class ProgressLogger:
    """
    Percentage progress of a batch, logged each time another
    `log_interval` percent is reached.
    """

    def __init__(self, logger: logging.Logger, operation: str, total: int, log_interval: int = 10):
        self.logger = logger
        self.operation = operation
        self.total = total
        self.log_interval = log_interval
        self.current = 0
        self._next_milestone = log_interval
        self._started = time.perf_counter()

    def update(self, current: int, message: Optional[str] = None) -> None:
        self.current = current
        percent = current * 100 // self.total if self.total > 0 else 100
        if percent < self._next_milestone:
            return

        self._next_milestone = percent - percent % self.log_interval + self.log_interval
        suffix = f" - {message}" if message else ""
        self.logger.info(f"{self.operation}: {percent}% ({current}/{self.total}){suffix}")

    def increment(self, message: Optional[str] = None) -> None:
        self.update(self.current + 1, message)

    def complete(self, message: Optional[str] = None) -> None:
        elapsed = time.perf_counter() - self._started
        suffix = f" - {message}" if message else ""
        self.logger.info(f"{self.operation}: Complete ({elapsed:.2f}s){suffix}")
