"""Centralized logging configuration for the translator services."""

import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from common.config import settings


def setup_logging(
    service_name: str, log_file: Optional[str] = None, log_level: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging for a service with consistent formatting.

    Handlers are attached to the root logger so that module-level loggers
    (``logging.getLogger(__name__)``) in ``common``, ``translator`` and
    ``manager`` all share the same output.

    Args:
        service_name: Name of the service (e.g., 'manager')
        log_file: Optional log file path. If None, logs only to console
        log_level: Optional log level override. If None, uses settings.log_level

    Returns:
        Logger named after the service
    """
    level = log_level or settings.log_level
    log_level_value = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level_value)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    detailed_formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    simple_formatter = logging.Formatter(
        fmt="%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level_value)
    console_handler.setFormatter(simple_formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(log_level_value)
        file_handler.setFormatter(detailed_formatter)
        root_logger.addHandler(file_handler)

    return logging.getLogger(service_name)


def get_log_file_path(service_name: str) -> str:
    """
    Generate a dated log file path for a service.

    Args:
        service_name: Name of the service

    Returns:
        Path to log file
    """
    date_string = datetime.now(timezone.utc).strftime("%Y%m%d")
    return f"./logs/{service_name}_{date_string}.log"


class ServiceLogger:
    """Convenience wrapper holding a configured service logger."""

    def __init__(self, service_name: str, enable_file_logging: bool = True):
        """
        Initialize service logger.

        Args:
            service_name: Name of the service
            enable_file_logging: Whether to enable file logging
        """
        self.service_name = service_name
        log_file = get_log_file_path(service_name) if enable_file_logging else None
        self.logger = setup_logging(service_name, log_file)


def configure_third_party_loggers(level: str = "WARNING") -> None:
    """
    Configure logging levels for third-party libraries to reduce noise.

    Args:
        level: Log level for third-party libraries
    """
    third_party_loggers = [
        "openai",
        "httpx",
        "httpcore",
        "asyncio",
        "uvicorn.access",
    ]

    log_level = getattr(logging, level.upper(), logging.WARNING)

    for logger_name in third_party_loggers:
        logging.getLogger(logger_name).setLevel(log_level)


def setup_service_logging(
    service_name: str, enable_file_logging: bool = True
) -> ServiceLogger:
    """
    Set up logging for a service.

    Args:
        service_name: Name of the service
        enable_file_logging: Whether to enable file logging

    Returns:
        ServiceLogger instance
    """
    configure_third_party_loggers()
    return ServiceLogger(service_name, enable_file_logging)
