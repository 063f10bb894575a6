"""Utility modules for configuration, logging, errors and the clipboard."""

from .config import Config
from .errors import (
    ConfigurationError,
    DisputeDataError,
    EngineUsageError,
    RefundDeskError,
    SideEffectError,
)
from .logging import setup_logging

__all__ = [
    'Config',
    'ConfigurationError',
    'DisputeDataError',
    'EngineUsageError',
    'RefundDeskError',
    'SideEffectError',
    'setup_logging',
]
