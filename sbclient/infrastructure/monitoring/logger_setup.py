"""Centralized logging configuration for the sbclient command line.

Sets up standard Python logging with appropriate levels, formatters,
and handlers (console, optional file). The library itself only creates
module loggers; configuring handlers is left to the application.
"""

import logging
import logging.handlers
import sys
from typing import List, Optional, Union

DEFAULT_LOG_LEVEL = logging.WARNING
DEFAULT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_FILE = None
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 3

# httpx logs every request at INFO; only surface that when debugging
NOISY_LOGGERS = ("httpx", "httpcore")

_installed_handlers: List[logging.Handler] = []


def resolve_log_level(level: Union[int, str, None], default: int = DEFAULT_LOG_LEVEL) -> int:
    """Turns 'debug', 'INFO', 10, ... into a logging level."""
    if isinstance(level, int):
        return level
    if not level:
        return default
    return getattr(logging, str(level).upper(), default)


def _file_handler(log_file: str) -> Optional[logging.Handler]:
    try:
        return logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=LOG_FILE_MAX_BYTES,
            backupCount=LOG_FILE_BACKUP_COUNT,
            encoding='utf-8',
        )
    except OSError as e:
        logging.getLogger(__name__).error(f"Cannot log to file {log_file}: {e}")
        return None


def setup_logging(
    log_level: int = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
    log_file: Optional[str] = DEFAULT_LOG_FILE
) -> None:
    """Installs the sbclient handlers on the root logger.

    Calling it again swaps out the handlers from the previous call; handlers
    installed by anything else are left in place.

    Args:
        log_level: The minimum logging level (e.g., logging.DEBUG, logging.INFO).
        log_format: The format string for log messages.
        log_file: Optional path to a size-rotated log file.
    """
    root_logger = logging.getLogger()
    while _installed_handlers:
        old = _installed_handlers.pop()
        root_logger.removeHandler(old)
        old.close()

    # stderr keeps stdout clean for JSON output
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        file_handler = _file_handler(log_file)
        if file_handler is not None:
            handlers.append(file_handler)

    formatter = logging.Formatter(log_format)
    for handler in handlers:
        handler.setLevel(log_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)
        _installed_handlers.append(handler)
    root_logger.setLevel(log_level)

    library_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    logging.getLogger(__name__).debug(
        f"Logging configured: level={logging.getLevelName(log_level)}, file={log_file or '-'}"
    )
