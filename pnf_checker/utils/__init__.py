"""Utility modules for dates, configuration, errors and logging."""

from .config import Config, RuleConfig
from .errors import (
    ConfigurationError,
    ErrorContext,
    ErrorType,
    FlowError,
    PNFCheckerError,
    Result,
)

__all__ = [
    'Config',
    'RuleConfig',
    'ConfigurationError',
    'ErrorContext',
    'ErrorType',
    'FlowError',
    'PNFCheckerError',
    'Result',
]
