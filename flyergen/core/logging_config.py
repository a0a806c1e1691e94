"""
Logging Configuration Module.

This module provides centralized logging configuration for FlyerGen.
It sets up structured logging with different levels for different modules and environments.

Features:
- Configurable log levels per module
- Console and rotating file logging
- Structured logging with JSON format support
- Separate error log file for provider and billing failures
"""

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, Dict, Optional


def _get_logging_config() -> Dict[str, Any]:
    """Get logging configuration from settings model.

    This function is used to defer settings import until needed,
    avoiding circular imports during module initialization.
    """
    try:
        from flyergen.server.core.config import settings

        return {
            "log_level": settings.log_level.upper(),
            "log_format": settings.log_format,
            "log_file_dir": settings.log_dir,
            "enable_file_logging": settings.enable_file_logging,
        }
    except Exception:
        # Fallback to environment variables if settings not available
        return {
            "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
            "log_format": os.getenv("LOG_FORMAT", "detailed"),
            "log_file_dir": os.getenv("LOG_DIR", "logs"),
            "enable_file_logging": os.getenv("ENABLE_FILE_LOGGING", "false").lower() in ("true", "1", "yes"),
        }


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
    # Provider layer
    "flyergen.providers": "INFO",
    "flyergen.providers.fallback": "DEBUG",
    # Billing
    "flyergen.billing": "INFO",
    # Server modules
    "flyergen.server": "INFO",
    "flyergen.server.api": "INFO",
    "flyergen.server.services": "DEBUG",
    "flyergen.server.exception_handlers": "INFO",
    # Persistence
    "flyergen.core.database": "INFO",
    # Third-party libraries (reduce noise)
    "sqlalchemy": "WARNING",
    "sqlalchemy.engine": "WARNING",
    "sqlalchemy.pool": "WARNING",
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "stripe": "WARNING",
    "asyncio": "WARNING",
    "uvicorn": "INFO",
    "uvicorn.access": "INFO",
}


def build_logging_config(
    level: str,
    fmt: str,
    enable_file: bool,
    log_dir: str,
) -> Dict[str, Any]:
    """
    Build a ``logging.config.dictConfig`` compatible dictionary.

    Args:
        level: Console log level
        fmt: One of ``simple``, ``detailed`` or ``json`` (unknown values fall back to ``detailed``)
        enable_file: Whether to add rotating file handlers
        log_dir: Directory holding the log files

    Returns:
        The configuration dictionary
    """
    handlers: Dict[str, Dict[str, Any]] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "default",
        },
    }
    if enable_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "default",
            "filename": str(Path(log_dir) / "flyergen.log"),
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
        }
        handlers["error_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "ERROR",
            "formatter": "default",
            "filename": str(Path(log_dir) / "flyergen_errors.log"),
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
            "encoding": "utf-8",
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": FORMATS.get(fmt, DETAILED_FORMAT),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": handlers,
        "root": {
            # Capture all levels, filter at handler level
            "level": "DEBUG",
            "handlers": list(handlers),
        },
        "loggers": {name: {"level": module_level} for name, module_level in MODULE_LOG_LEVELS.items()},
    }


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_file: Optional[bool] = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        log_level: Override default log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Override default format (simple, detailed, json)
        enable_file: Override whether file logging is enabled
    """
    config = _get_logging_config()
    level = (log_level or config["log_level"]).upper()
    fmt = log_format or config["log_format"]
    file_logging = config["enable_file_logging"] if enable_file is None else enable_file
    log_dir = config["log_file_dir"]

    if file_logging:
        Path(log_dir).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(level, fmt, file_logging, log_dir))

    logging.getLogger(__name__).info(f"Logging configured: level={level}, format={fmt}, file_logging={file_logging}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The module name (typically __name__)

    Returns:
        A configured logger instance
    """
    return logging.getLogger(name)
