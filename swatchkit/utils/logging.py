"""
swatchkit Structured Logging
Centralized logging configuration using loguru.

The package disables its own log records on import so that importing it
never touches the host application's sinks. Call ``configure_logging()``
to opt in to swatchkit's stdout format.
"""
import sys
from typing import Dict, Any, Optional

from loguru import logger

from swatchkit.config import config

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}"


def configure_logging(level: Optional[str] = None, sink=sys.stdout) -> int:
    """
    Enable swatchkit log records and add a sink for them.

    Existing sinks are left in place.

    Args:
        level: Minimum level for the new sink (default from config)
        sink: Any loguru sink (default stdout)

    Returns:
        Handler id, usable with ``logger.remove()``
    """
    logger.enable("swatchkit")
    return logger.add(
        sink,
        format=LOG_FORMAT,
        level=level or config.LOG_LEVEL,
        filter="swatchkit",
        serialize=False  # Set to True for JSON output
    )


class StructuredLogger:
    """Structured logger for palette extraction."""

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log info message with optional extra data."""
        logger.bind(**(extra or {})).info(message)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log warning message with optional extra data."""
        logger.bind(**(extra or {})).warning(message)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log error message with optional extra data."""
        logger.bind(**(extra or {})).error(message)


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Get or create global logger instance."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger()
    return _logger
