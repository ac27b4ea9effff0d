"""
Utilities module - Logging helpers shared by both engines.
"""

from .logger import (
    setup_logging,
    get_logger,
    LogContext,
    ProgressLogger,
)

__all__ = [
    'setup_logging',
    'get_logger',
    'LogContext',
    'ProgressLogger',
]
