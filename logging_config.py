"""
Logging setup for the voice transcription pipeline.

One rotating log file per log directory plus an optional console stream.
Transcription jobs can run for many minutes, so file records carry
timestamps while the console stays short.
"""

import logging
import logging.handlers
from pathlib import Path
from typing import Optional

DEFAULT_LOG_FILE = "transcriber.log"
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
CONSOLE_FORMAT = '%(levelname)s - %(name)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Libraries that log every request at INFO/DEBUG
NOISY_LOGGERS = ("urllib3", "requests")


def _resolve_level(log_level: str) -> int:
    level = logging.getLevelName(log_level.upper())
    return level if isinstance(level, int) else logging.INFO


def _rotating_handler(path: Path, level: int, max_bytes: int, backup_count: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=str(path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=CONSOLE_FORMAT))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_dir: Optional[str] = None,
    log_file: str = DEFAULT_LOG_FILE,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
    console_output: bool = True
) -> Path:
    """
    Replace the root logger's handlers with a rotating file and, optionally, stderr.

    Calling it again swaps the handlers instead of stacking new ones.

    Args:
        log_level: Level name; unknown names fall back to INFO
        log_dir: Directory for the log file (default: ./logs)
        log_file: File name inside log_dir
        max_bytes: Size at which the file is rotated
        backup_count: Rotated files to keep
        console_output: Also log to stderr

    Returns:
        Path of the active log file
    """
    level = _resolve_level(log_level)

    directory = Path(log_dir or "logs")
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / log_file

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(level)
    root_logger.addHandler(_rotating_handler(log_path, level, max_bytes, backup_count))
    if console_output:
        root_logger.addHandler(_console_handler(level))

    # Request-level chatter only at DEBUG
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logging.getLogger(__name__).info(f"Logging to {log_path} at {logging.getLevelName(level)}")
    return log_path


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name`` (usually ``__name__``)."""
    return logging.getLogger(name)
