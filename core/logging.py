"""
Logging setup

Console plus a daily rolled file under logs/<process>/. Context passed with
``extra=`` (entry_id, actor, ...) is appended to each line as key=value.

Usage:
    from core.logging import setup_logging
    setup_logging("web")
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Paths


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 7

# Raised to WARNING
NOISY_LOGGERS = [
    "aiosqlite",       # executing/completed for every query
    "asyncio",
    "httpcore",
    "httpx",           # TestClient requests
    "uvicorn.access",  # one line per request
]

# Attributes every LogRecord carries; anything else came from extra=
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


class ContextFormatter(logging.Formatter):
    """Formatter that appends extra= context

    Example:
        logger.info("Journal entry locked", extra={"entry_id": 7, "actor": "alice"})
        # 2024-01-31 09:00:00 | INFO     | core.ledger.store | Journal entry locked | entry_id=7 actor=alice
    """

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if not context:
            return line

        pairs = " ".join(f"{key}={value}" for key, value in context.items())
        # Keep the traceback (if any) below the context
        head, sep, tail = line.partition("\n")
        return f"{head} | {pairs}{sep}{tail}"


def get_log_file_path(process_name: str, log_root: Path | None = None) -> Path:
    """logs/<process>/<process>.log"""
    root = log_root or Paths.LOGS_DIR
    return root / process_name / f"{process_name}.log"


def setup_logging(
    process_name: str,
    console_level: int | str = logging.INFO,
    file_level: int | str = logging.INFO,
    log_root: Path | None = None,
) -> logging.Logger:
    """Configure the root logger for one process

    Replaces any handlers already installed, so calling it twice does not
    duplicate output.

    Args:
        process_name: process name, also the log directory ("web")
        console_level: console level
        file_level: file level
        log_root: log root directory (default: logs/)

    Returns:
        The root logger
    """
    log_file = get_log_file_path(process_name, log_root)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    formatter = ContextFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.suffix = "%Y-%m-%d"  # web.log.2024-01-31
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info(
        "Logging initialized",
        extra={
            "process_name": process_name,
            "log_file": str(log_file),
            "console_level": logging.getLevelName(console_handler.level),
            "file_level": logging.getLevelName(file_handler.level),
        },
    )
    return root_logger
