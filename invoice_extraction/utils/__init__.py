"""
Utility Module for Invoice Extraction System.

This module provides common utilities used across all other modules:
    - Logging configuration
    - Exception hierarchy
    - File helpers
"""

from .logger import setup_logger, setup_logger_from_config, get_logger
from .helpers import (
    ensure_directory,
    get_file_extension,
)

__all__ = [
    'setup_logger',
    'setup_logger_from_config',
    'get_logger',
    'ensure_directory',
    'get_file_extension',
]
