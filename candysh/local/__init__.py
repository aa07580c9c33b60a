"""
Local package for the candysh interpreter.

This package provides the merged runtime configuration through the
effective_settings object, plus the console, supervisor and database
subpackages.
"""

from .config import effective_settings

__all__ = ["effective_settings"]
