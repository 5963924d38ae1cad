"""Logging utility with verbosity levels and file logging."""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

VERBOSITY_FLAGS = {"-v": 1, "-vv": 2, "-vvv": 3}

# Third-party loggers that are only interesting at the highest verbosity
NOISY_LOGGERS = ("aiosqlite", "httpx", "httpcore", "openai")


def setup_logging(
    verbosity: int = 0,
    log_file: Optional[str] = None,
    log_dir: str = "logs",
) -> logging.Logger:
    """
    Set up console logging at the verbosity level plus a DEBUG log file.

    Args:
        verbosity: 0=WARNING, 1=INFO, 2=DEBUG, 3=DEBUG including third-party libraries
        log_file: Optional log file path. If None, a timestamped file in log_dir is used.
        log_dir: Directory for the default log file

    Returns:
        Configured logger instance
    """
    if verbosity <= 0:
        log_level = logging.WARNING
    elif verbosity == 1:
        log_level = logging.INFO
    else:
        log_level = logging.DEBUG

    if log_file is None:
        logs_dir = Path(log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_path = logs_dir / f"planner_{timestamp}.log"
    else:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(console_handler)

    # File handler is always DEBUG so a session can be replayed afterwards
    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbosity >= 3 else logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"Logging initialized. Verbosity: {verbosity}, Log file: {log_path}")

    return logger


def parse_verbosity(args: List[str]) -> int:
    """
    Parse verbosity level (0-3) from command line arguments.

    The last verbosity flag wins.
    """
    verbosity = 0
    for arg in args:
        if arg in VERBOSITY_FLAGS:
            verbosity = VERBOSITY_FLAGS[arg]
    return verbosity


def strip_verbosity_flags(args: List[str]) -> List[str]:
    """Remove -v/-vv/-vvv from an argument list."""
    return [arg for arg in args if arg not in VERBOSITY_FLAGS]
