"""
Logging setup for the application.
"""

import os
import time
import logging
import logging.handlers
from dataclasses import dataclass
from functools import wraps
from typing import Optional


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_file: Optional[str] = None
    max_size_mb: int = 10
    backup_count: int = 3

    @classmethod
    def from_dict(cls, config: dict) -> "LoggingConfig":
        """Create config from dictionary."""
        return cls(
            level=config.get("level", "INFO"),
            log_file=config.get("log_file"),
            max_size_mb=config.get("max_size_mb", 10),
            backup_count=config.get("backup_count", 3),
        )


def setup_logging(level="INFO", log_file=None, max_size_mb=10, backup_count=3):
    """Configure console logging and an optional rotating log file."""
    console_format = "%(asctime)s  %(levelname)-5s  %(message)s"
    file_format = "%(asctime)s [%(levelname)-7s] %(name)-32s | %(message)s"
    date_format = "%H:%M:%S"

    root_logger = logging.getLogger()
    root_level = getattr(logging, str(level).upper(), logging.INFO)
    root_logger.setLevel(root_level)
    root_logger.handlers.clear()

    console = logging.StreamHandler()
    console.setLevel(root_level)
    console.setFormatter(logging.Formatter(console_format, datefmt=date_format))
    root_logger.addHandler(console)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(file_format, datefmt=date_format))
        root_logger.addHandler(file_handler)

    return root_logger


def log_timing(func):
    """Decorator to log function execution time at DEBUG."""
    logger = logging.getLogger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs):
        start = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = (time.perf_counter() - start) * 1000
        logger.debug("%s took %.2fms", func.__name__, elapsed)
        return result

    return wrapper
