import logging
import sys

from candysh.local import effective_settings as config
from candysh.log.handler import SQLiteHandler

SHORT_FORMAT = '%(levelname)s: %(message)s'
FULL_FORMAT = '%(asctime)s - %(levelname)-8s - [%(name)s] - %(message)s'


class MainFormatter(logging.Formatter):
    """
    Console formatter. Keeps interpreter output terse unless the console is
    in verbose (DEBUG) mode, where timestamps and logger names are shown.
    """

    def __init__(self, verbose: bool = False):
        super().__init__(FULL_FORMAT if verbose else SHORT_FORMAT)
        self.verbose = verbose

    def set_verbose(self, verbose: bool) -> None:
        self.verbose = verbose
        self._style._fmt = FULL_FORMAT if verbose else SHORT_FORMAT


def setup_logging(console_level: int = logging.WARNING) -> None:
    """
    Configures the root logger for the interpreter.
    This sets up handlers for the console and, when enabled, the SQLite log
    database, clearing any previously configured handlers to prevent duplication.

    :param console_level: The logging level for the console output (e.g., logging.INFO).
    """
    root_logger = logging.getLogger()
    # Set root level to lowest to capture all messages for handler filtering
    root_logger.setLevel(logging.DEBUG)

    if root_logger.hasHandlers():
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

    # --- Console Handler ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(MainFormatter(verbose=console_level <= logging.DEBUG))
    root_logger.addHandler(console_handler)

    # --- SQLite Handler (all levels) ---
    if config.LOG_DB_ENABLED:
        try:
            sqlite_handler = SQLiteHandler(
                db_path=config.LOG_DB_PATH,
                buffer_size=config.LOG_BUFFER_SIZE,
                flush_interval=config.LOG_BUFFER_FLUSH_INTERVAL,
            )
            sqlite_handler.setLevel(logging.DEBUG)
            root_logger.addHandler(sqlite_handler)
        except Exception as e:
            root_logger.error(f"Failed to initialize SQLite logging handler: {e}. Logging to DB will be disabled.")


def set_console_level(level: int) -> bool:
    """
    Changes the level of the console handler installed by setup_logging.

    :param level: The new logging level.
    :return bool: True if a console handler was found and updated.
    """
    for handler in logging.getLogger().handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(level)
            if isinstance(handler.formatter, MainFormatter):
                handler.formatter.set_verbose(level <= logging.DEBUG)
            return True
    return False


def set_db_buffering(buffer_size: int, flush_interval: float) -> bool:
    """
    Pushes new buffer thresholds into the installed SQLite handler.

    :return bool: True if a SQLite handler was found and updated.
    """
    for handler in logging.getLogger().handlers:
        if isinstance(handler, SQLiteHandler):
            handler.configure(buffer_size, flush_interval)
            return True
    return False
