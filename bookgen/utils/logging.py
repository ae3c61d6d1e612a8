"""Logging setup with verbosity levels and a per-build log file."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - %(funcName)s:%(lineno)d - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def verbosity_to_level(verbosity: int) -> int:
    """
    Map a -v count to a console log level.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2 or more=DEBUG

    Returns:
        logging level
    """
    if verbosity <= 0:
        return logging.WARNING
    if verbosity == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(
    verbosity: int = 0,
    log_file: Optional[Union[str, Path]] = None,
    logs_dir: Union[str, Path] = "logs",
) -> logging.Logger:
    """
    Set up console and file logging.

    Args:
        verbosity: Console verbosity (see verbosity_to_level)
        log_file: Log file path. If None, logs/build_<timestamp>.log is used.
        logs_dir: Directory for the default log file

    Returns:
        Configured logger instance
    """
    if log_file is None:
        logs_path = Path(logs_dir)
        logs_path.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = logs_path / f"build_{timestamp}.log"
    else:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(verbosity_to_level(verbosity))
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(console_handler)

    # File handler is always DEBUG to capture everything
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
    root_logger.addHandler(file_handler)

    # notion_client and httpx log every request at DEBUG/INFO
    for noisy in ("notion_client", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized. Verbosity: {verbosity}, Log file: {log_file}")

    return logger

