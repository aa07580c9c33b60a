"""
This module initializes the console package, exposing the command dispatcher,
the session state it works on, and the verbose toggle and help output used by
the entry point.
"""

from .process import ConsoleSession, execute_command, execute_line
from .handler import toggle_verbose_logging, print_help

__all__ = ["ConsoleSession", "execute_command", "execute_line", "toggle_verbose_logging", "print_help"]
