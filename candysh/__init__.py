"""candysh: an interactive interpreter that runs programs and tracks background processes."""

__version__ = "0.1.0"
