"""Structured logging setup for the PNF checker."""

import logging
from typing import Optional, Dict, Any
from pathlib import Path

# Fields every record carries so format strings can reference them safely
DEFAULT_CONTEXT_FIELDS: Dict[str, Any] = {"walkthrough_id": "-"}


class ContextFilter(logging.Filter):
    """Add walkthrough context information to log records."""

    def __init__(self, defaults: Optional[Dict[str, Any]] = None):
        super().__init__()
        self.defaults: Dict[str, Any] = dict(defaults or DEFAULT_CONTEXT_FIELDS)
        self.context: Dict[str, Any] = {}

    def filter(self, record: logging.LogRecord) -> bool:
        """Add context fields to log record."""
        for key, value in self.defaults.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        for key, value in self.context.items():
            setattr(record, key, value)
        return True

    def set_context(self, **kwargs):
        """Set context fields for logging."""
        self.context.update(kwargs)

    def clear_context(self):
        """Clear all context fields."""
        self.context.clear()


# Global context filter instance
_context_filter = ContextFilter()


def setup_logging(
    level: str = "INFO",
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Set up structured logging with optional file output.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Format string for log messages; may reference
            ``%(walkthrough_id)s``
        log_file: Optional path to log file

    Returns:
        Configured root logger
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Remove existing handlers
    root_logger.handlers.clear()

    formatter = logging.Formatter(log_format)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(_context_filter)
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(_context_filter)
        root_logger.addHandler(file_handler)

    return root_logger


def set_context(**kwargs):
    """
    Set context fields for all subsequent log messages.

    Example:
        set_context(walkthrough_id="WT-1A2B3C4D")
        logger.info("Verdict reached")  # Carries walkthrough_id

    Args:
        **kwargs: Context key-value pairs
    """
    _context_filter.set_context(**kwargs)


def clear_context():
    """Clear all context fields."""
    _context_filter.clear_context()
