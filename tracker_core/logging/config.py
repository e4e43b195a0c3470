# =============================================================================
# tracker_core/logging/config.py
# Logging Configuration for the Time Tracker
# =============================================================================
"""
Logging for the sync core.

setup_logging() configures the "tracker_core" package logger only, so an
embedding application keeps control of the root logger. Records still
propagate to root handlers (pytest's caplog included).
"""

import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union


LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

PACKAGE_LOGGER = "tracker_core"

# Chatty HTTP/client libraries used by the Supabase SDK
NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "hpack", "supabase", "postgrest")

# Marks handlers installed here so a second setup replaces them
_HANDLER_FLAG = "_tracker_core_handler"


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _build_handlers(log_dir: Optional[Path], log_filename: Optional[str]) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        filename = log_filename or f"tracker_{datetime.now().strftime('%Y-%m-%d')}.log"
        handlers.append(logging.FileHandler(log_dir / filename, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_FLAG, True)
    return handlers


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_dir: Optional[Path] = None,
    log_filename: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the package logger.

    Calling it again replaces the handlers from the previous call.

    Args:
        level: Level as an int or a name such as "DEBUG"; unknown names fall back to INFO
        log_dir: Also write a daily log file here (no file when None)
        log_filename: Custom log filename (default: tracker_YYYY-MM-DD.log)

    Returns:
        The configured "tracker_core" logger
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)

    for handler in list(package_logger.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            package_logger.removeHandler(handler)
            handler.close()

    for handler in _build_handlers(log_dir, log_filename):
        package_logger.addHandler(handler)
    package_logger.setLevel(_resolve_level(level))

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    package_logger.info(
        f"Logging initialized at {logging.getLevelName(package_logger.level)}"
        + (f", file output in {log_dir}" if log_dir is not None else "")
    )
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Usage:
        from tracker_core.logging import get_logger
        logger = get_logger(__name__)
    """
    return logging.getLogger(name)


class LogContext:
    """
    Times an operation and logs its outcome.

    Usage:
        with LogContext(logger, "Syncing 3 entries"):
            ...
        # "Syncing 3 entries... started"
        # "Syncing 3 entries... completed (0.42s)"
    """

    def __init__(self, logger: logging.Logger, operation: str, level: int = logging.INFO):
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.log(self.level, f"{self.operation}... started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - self.start_time

        if exc_type is None:
            self.logger.log(self.level, f"{self.operation}... completed ({elapsed:.2f}s)")
        else:
            self.logger.error(f"{self.operation}... failed ({elapsed:.2f}s): {exc_val}", exc_info=True)

        return False
