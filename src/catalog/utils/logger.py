"""Run logging for the catalog CLI.

Engine modules only log through ``logging.getLogger(__name__)``. The CLI
calls setup_logger once per run on the ``src`` logger, which attaches a
terse stderr handler and a timestamped daily file handler. Calling it
again reconfigures the logger in place: the handlers it installed before
are closed and replaced, handlers installed by anyone else are left alone.
"""

import logging
import sys
from datetime import date
from pathlib import Path

_CONSOLE_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"
_FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

CONSOLE_HANDLER_NAME = "catalog.console"
FILE_HANDLER_NAME = "catalog.file"
DEFAULT_LOG_DIR = Path("logs")


def setup_logger(
    name: str,
    level: int | str = logging.INFO,
    log_dir: Path | None = None,
) -> logging.Logger:
    """Configure and return a logger with console and file handlers.

    Args:
        name: Logger name (e.g., 'src'). Child loggers reach its handlers.
        level: Logging level as int or name, INFO when unknown.
        log_dir: Directory for log files. If None, uses 'logs/'.

    Returns:
        Configured logger instance.
    """
    resolved = _resolve_level(level)
    logger = logging.getLogger(name)
    logger.setLevel(resolved)
    logger.propagate = False
    _remove_installed_handlers(logger)

    logger.addHandler(_create_console_handler(resolved))

    path = log_file_path(name, log_dir)
    try:
        logger.addHandler(_create_file_handler(path, resolved))
    except OSError as e:
        logger.warning("Logging to console only, cannot open %s: %s", path, e)

    return logger


def log_file_path(name: str, log_dir: Path | None = None, day: date | None = None) -> Path:
    """Build the daily log file path for a logger.

    Args:
        name: Logger name, dots and slashes become underscores.
        log_dir: Directory for log files. If None, uses 'logs/'.
        day: Date of the file, today when None.

    Returns:
        Path such as ``logs/src_20240601.log``.
    """
    safe_name = name.replace(".", "_").replace("/", "_")
    day = day or date.today()
    return (log_dir or DEFAULT_LOG_DIR) / f"{safe_name}_{day:%Y%m%d}.log"


def _resolve_level(level: int | str) -> int:
    """Convert a level name to its numeric value, INFO when unknown."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _remove_installed_handlers(logger: logging.Logger) -> None:
    """Close and detach handlers a previous setup_logger call attached."""
    for handler in list(logger.handlers):
        if handler.get_name() in (CONSOLE_HANDLER_NAME, FILE_HANDLER_NAME):
            logger.removeHandler(handler)
            handler.close()


def _create_console_handler(level: int) -> logging.StreamHandler:
    # stderr keeps stdout free for the CLI summary
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(CONSOLE_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    return handler


def _create_file_handler(path: Path, level: int) -> logging.FileHandler:
    """Create a UTF-8 file handler, creating its directory.

    Args:
        path: Log file path.
        level: Logging level.

    Returns:
        Configured FileHandler.

    Raises:
        OSError: If the directory or file cannot be created.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.set_name(FILE_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, _FILE_DATE_FORMAT))
    return handler
