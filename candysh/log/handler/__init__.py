"""
Logging handlers for the interpreter.
This module provides the handlers that persist log records beyond the console.
"""

from .sql import SQLiteHandler

__all__ = ["SQLiteHandler"]
