"""
Logging module for the interpreter.
This module provides functionality to set up console and database logging.
"""

from .setup import setup_logging, set_console_level, set_db_buffering

__all__ = ["setup_logging", "set_console_level", "set_db_buffering"]
