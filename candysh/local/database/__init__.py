"""
This module initializes the local database management system.
It exposes the database manager for the interpreter's log records.
"""

from .log import LogDBManager, LogEntry

__all__ = ["LogDBManager", "LogEntry"]
