"""
Central logging configuration for RentWise.

Console output always; optional rotating file output written through a
queue listener so request handlers never block on disk I/O.
"""

import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler

from .context import TransactionIdFilter
from .formatter import build_formatter

APP_LOGGER_NAME = "rentwise_backend"

# Third-party loggers that are too chatty at INFO
_QUIET_LOGGERS = {
    "sqlalchemy": logging.WARNING,
    "asyncmy": logging.WARNING,
    "aiosqlite": logging.WARNING,
    "urllib3": logging.WARNING,
    "uvicorn": logging.INFO,
    "fastapi": logging.INFO,
}


class LoggingConfig:
    """Owns the handlers installed on the application logger."""

    def __init__(self):
        self._listener: QueueListener | None = None
        self._is_configured = False

    def setup(
        self,
        log_to_file: bool = False,
        log_level: str = "INFO",
        log_file_path: str = "logs/app.log",
        use_json_format: bool = True,
        max_bytes: int = 50 * 1024 * 1024,
        backup_count: int = 5,
    ) -> logging.Logger:
        """
        Install console (and optionally file) handlers on the app logger.

        Args:
            log_to_file: Whether to also write to a rotating log file
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_file_path: Path to the log file
            use_json_format: Whether to use JSON formatting
            max_bytes: Maximum file size before rotation
            backup_count: Number of backup files to keep

        Returns:
            Configured application logger
        """
        app_logger = logging.getLogger(APP_LOGGER_NAME)
        if self._is_configured:
            return app_logger

        level = getattr(logging, log_level.upper(), logging.INFO)
        formatter = build_formatter(use_json_format)
        transaction_filter = TransactionIdFilter()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)

        handlers: list[logging.Handler] = [console_handler]
        if log_to_file:
            directory = os.path.dirname(log_file_path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file_path, maxBytes=max_bytes, backupCount=backup_count
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)

        log_queue: queue.Queue = queue.Queue()
        queue_handler = QueueHandler(log_queue)
        queue_handler.setLevel(level)
        queue_handler.addFilter(transaction_filter)

        self._listener = QueueListener(
            log_queue, *handlers, respect_handler_level=True
        )
        self._listener.start()

        app_logger.handlers = [queue_handler]
        app_logger.setLevel(level)
        app_logger.propagate = False

        for name, quiet_level in _QUIET_LOGGERS.items():
            logging.getLogger(name).setLevel(quiet_level)

        self._is_configured = True
        return app_logger

    def shutdown(self) -> None:
        """Flush and stop the queue listener."""
        if self._listener:
            self._listener.stop()
            self._listener = None
        self._is_configured = False


# Global logging configuration instance
_logging_config = LoggingConfig()


def setup_logging(settings=None) -> logging.Logger:
    """
    Set up logging from application settings.

    Args:
        settings: Settings instance; the global one is used when omitted

    Returns:
        Configured application logger
    """
    if settings is None:
        from ...config import settings

    return _logging_config.setup(
        log_to_file=settings.log_to_file,
        log_level=settings.log_level,
        log_file_path=settings.log_file_path,
        use_json_format=settings.log_format.lower() == "json",
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Get a logger under the application namespace.

    Args:
        name: Module name, usually ``__name__``

    Returns:
        Logger instance
    """
    if not name:
        return logging.getLogger(APP_LOGGER_NAME)
    if name.startswith(APP_LOGGER_NAME):
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_LOGGER_NAME}.{name}")


def shutdown_logging() -> None:
    """Shutdown logging gracefully."""
    _logging_config.shutdown()
