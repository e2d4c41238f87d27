"""
Logging Configuration Module.

Centralized logging setup for applications embedding the Shadowrun client.

Features:
- Configurable log levels per module
- Console and optional file logging
- Simple, detailed and JSON line formats

The library itself only emits records through `logging.getLogger(__name__)`;
nothing is configured on import. Hosts call `setup_logging()` once at startup.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from shadowrun_client.config import ClientSettings

# Define log formats
SIMPLE_FORMAT = "%(levelname)s - %(name)s - %(message)s"

DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(funcName)s() - %(message)s"

JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"module": "%(filename)s", "function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)

FORMATS = {
    "simple": SIMPLE_FORMAT,
    "detailed": DETAILED_FORMAT,
    "json": JSON_FORMAT,
}

# Module-specific log levels
MODULE_LOG_LEVELS = {
    "shadowrun_client": "INFO",
    "shadowrun_client.client": "DEBUG",
    "shadowrun_client.console": "DEBUG",
    "shadowrun_client.stream": "DEBUG",
    "shadowrun_client.transport": "INFO",
    "shadowrun_client.auth": "INFO",
    "shadowrun_client.realtime": "INFO",
    # Third-party libraries (reduce noise)
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "websockets": "WARNING",
    "asyncio": "WARNING",
}


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[Union[str, Path]] = None,
) -> None:
    """
    Configure logging for the host application.

    Args:
        log_level: Override the configured log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Override the configured format (simple, detailed, json)
        log_file: Optional file that receives DEBUG and above in addition to the console
    """
    if log_level is None or log_format is None:
        settings = ClientSettings()
        log_level = log_level or settings.log_level
        log_format = log_format or settings.log_format

    level = log_level.upper()
    format_str = FORMATS.get(log_format, DETAILED_FORMAT)
    formatter = logging.Formatter(format_str, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Capture all levels, filter at handler level

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    for module_name, module_level in MODULE_LOG_LEVELS.items():
        logging.getLogger(module_name).setLevel(module_level)

    root_logger.info(f"Logging configured: level={level}, format={log_format}, file_logging={log_file is not None}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The module name (typically __name__)

    Returns:
        A configured logger instance
    """
    return logging.getLogger(name)
