"""
Logging client configuration.

Console output for local runs, plus an optional socket handler that ships
records to a centralized logging service when LOGGING_HOST is set.
"""
import logging
import logging.handlers
from typing import Optional

from insights_core.config import Settings, settings as default_settings


def silence_noisy_loggers(noisy_loggers: str) -> None:
    """Set comma-separated third-party loggers to WARNING."""
    for name in noisy_loggers.split(","):
        name = name.strip()
        if name:
            logging.getLogger(name).setLevel(logging.WARNING)


def setup_logger(service_name: Optional[str] = None, settings: Optional[Settings] = None) -> logging.Logger:
    """
    Setup the package logger.

    Args:
        service_name: Name stamped on every record (defaults to SERVICE_NAME)
        settings: Configuration (defaults to the global settings)

    Returns:
        Configured logger for the insights_core package
    """
    settings = settings or default_settings
    service_name = service_name or settings.SERVICE_NAME

    # Package logger, so module loggers (insights_core.*) propagate to it
    logger = logging.getLogger("insights_core")
    logger.setLevel(getattr(logging, settings.APP_LOG_LEVEL.upper(), logging.INFO))

    # Remove existing handlers
    logger.handlers = []

    # Add service name to all log records
    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        record.service = service_name
        return record

    logging.setLogRecordFactory(record_factory)

    if settings.LOGGING_HOST:
        socket_handler = logging.handlers.SocketHandler(settings.LOGGING_HOST, settings.LOGGING_PORT)
        logger.addHandler(socket_handler)

    console_handler = logging.StreamHandler()
    console_formatter = logging.Formatter(
        '%(asctime)s - [%(service)s] - %(levelname)s - %(message)s'
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    silence_noisy_loggers(settings.NOISY_LOGGERS)

    return logger
