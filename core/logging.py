"""
Logging setup

Shared by the web app and the maintenance scripts.
- console: INFO
- file: INFO (TimedRotatingFileHandler, daily)

Usage:
    from core.logging import setup_logging
    setup_logging("web")  # web app
    setup_logging("cli")  # scripts
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from core.constants import Paths


LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_BACKUP_COUNT = 14  # days of files kept

# Loggers lowered to WARNING
NOISY_LOGGERS = [
    "aiosqlite",      # one line per query
    "httpcore",
    "httpx",
    "asyncio",
    "uvicorn.access",
]


def get_log_dir(process_name: str) -> Path:
    if process_name == "web":
        return Paths.WEB_LOGS_DIR
    if process_name == "cli":
        return Paths.CLI_LOGS_DIR
    return Paths.LOGS_DIR


def get_log_file_path(process_name: str) -> Path:
    return get_log_dir(process_name) / f"{process_name}.log"


def setup_logging(
    process_name: str,
    console_level: int = logging.INFO,
    file_level: int = logging.INFO,
) -> logging.Logger:
    """Initialize root logging

    Writes to logs/<process>/<process>.log, rolled over at midnight.

    Args:
        process_name: "web", "cli", or any other name (goes to logs/)
        console_level: console handler level
        file_level: file handler level

    Returns:
        the configured root logger
    """
    log_file = get_log_file_path(process_name)
    log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers filter
    root_logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_handler = TimedRotatingFileHandler(
        filename=log_file,
        when="midnight",
        interval=1,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.suffix = "%Y-%m-%d"  # web.log.2025-09-11
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    for logger_name in NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    root_logger.info(f"Logging initialized: {process_name}")
    root_logger.info(f"  - console: {logging.getLevelName(console_level)}")
    root_logger.info(f"  - file: {log_file} ({logging.getLevelName(file_level)}, daily rotation)")

    return root_logger
