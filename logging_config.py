"""
Centralized logging configuration for the storefront client.

Every log line carries the thread name (page loads fan out to worker
threads) and, when inside a Flask request, the method and path that
caused it.

Features:
    - Thread name in all log messages
    - Request method/path in all log messages ("-" outside a request)
    - Console output (always enabled)
    - Rotating file logs (optional, for production)
    - Separate error log for ERROR/CRITICAL messages

Log Format:
    2026-10-19 10:15:30 [INFO    ] [MainThread] [POST /login] storefront.services.session_manager - Login complete for user 7
    2026-10-19 10:15:31 [WARNING ] [Profile_2] [GET /profile] storefront.services.order_gateway - Sales list unavailable, showing none

Usage:
    # At application startup
    from logging_config import setup_logging, get_logger

    setup_logging(log_level=logging.INFO, enable_file_logging=True)

    # In modules
    logger = get_logger(__name__)

Access and refresh tokens must never be passed to a logger.
"""

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from flask import has_request_context, request


APP_LOGGER_NAME = "storefront"


# =============================================================================
# CONTEXT FILTERS
# =============================================================================

class ThreadContextFilter(logging.Filter):
    """Adds ``thread_name`` to each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.thread_name = threading.current_thread().name
        return True


class RequestContextFilter(logging.Filter):
    """
    Adds ``request_line`` ("GET /profile") to each record.

    Outside a request context (startup, shutdown) the field is "-".
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_line = "-"
        if has_request_context():
            record.request_line = f"{request.method} {request.path}"
        return True


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logging(
    app_name: str = APP_LOGGER_NAME,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = True,
) -> logging.Logger:
    """
    Configure application logging.

    This sets up:
    1. Console handler (always enabled)
    2. Rotating file handler (optional)
    3. Error file handler (optional) - ERROR/CRITICAL only
    4. Thread and request context filters on every handler

    Args:
        app_name: Name of the root application logger
        log_level: Minimum log level (default: INFO)
        log_dir: Directory for log files (default: ./logs next to this file)
        enable_file_logging: Whether to write to log files (default: True)

    Returns:
        Configured application logger
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(log_level)
    logger.propagate = False  # Prevent duplicate logs to root logger

    # Remove any existing handlers (allows re-configuration)
    logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)-8s] [%(thread_name)s] [%(request_line)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    filters = (ThreadContextFilter(), RequestContextFilter())

    def _add_handler(handler: logging.Handler, level: int) -> None:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        for f in filters:
            handler.addFilter(f)
        logger.addHandler(handler)

    _add_handler(logging.StreamHandler(sys.stdout), log_level)

    if enable_file_logging:
        if log_dir is None:
            log_dir = Path(__file__).parent / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        app_log_file = log_dir / f"{app_name}.log"
        _add_handler(
            RotatingFileHandler(
                filename=app_log_file,
                maxBytes=10 * 1024 * 1024,  # 10 MB per file
                backupCount=5,
                encoding="utf-8"
            ),
            log_level,
        )
        _add_handler(
            RotatingFileHandler(
                filename=log_dir / f"{app_name}_error.log",
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8"
            ),
            logging.ERROR,
        )

        logger.info(f"File logging enabled: {app_log_file}")

    logger.info(f"Logging configured at level {logging.getLevelName(log_level)}")
    return logger


# =============================================================================
# LOGGER FACTORY
# =============================================================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger under the application namespace.

    Example:
        # In services/session_manager.py
        logger = get_logger(__name__)
        # Logger name: "storefront.services.session_manager"
    """
    if not name.startswith(APP_LOGGER_NAME):
        name = f"{APP_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
