"""
This module contains the configuration defaults for the candysh interpreter.
It defines paths, prompt and process settings, and logging configuration.
Values can be overridden from the environment (or a .env file), and the
settings listed in MODIFIABLE_SETTINGS can also be changed at runtime with the
'config' command.
"""

import os
import pathlib
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ('true', '1', 't', 'yes', 'y')


#* --- Core Paths ---
BASE_DIR = pathlib.Path(__file__).resolve().parent
DATA_DIR = pathlib.Path(os.getenv("CANDYSH_HOME", pathlib.Path.home() / ".candysh"))
LOGS_DIR = DATA_DIR / "logs"

#* --- Application File Paths ---
LOG_DB_PATH = LOGS_DIR / "candysh_logs.db"
OVERRIDES_JSON_PATH = DATA_DIR / "overrides.json"

#* --- Interpreter Settings ---
PROCESS_TITLE = os.getenv("CANDYSH_PROCESS_TITLE", "candysh")
PROMPT = os.getenv("CANDYSH_PROMPT", "# ")
HISTORY_LIMIT = 1024

#* --- Process Supervisor Settings ---
# Bare program names are looked up on PATH (execvp). When False, they are
# resolved against the working directory only (execv).
SEARCH_PATH = _env_flag("CANDYSH_SEARCH_PATH", "True")
# When True, a stopped foreground child ends the wait with a Stopped outcome.
FOREGROUND_STOP_ENDS_WAIT = _env_flag("CANDYSH_STOP_ENDS_WAIT", "False")
REAP_TIMEOUT = 2.0  # seconds to collect a child after SIGKILL

#* --- Logging ---
CONSOLE_LOG_LEVEL = os.getenv("CANDYSH_LOG_LEVEL", "WARNING").upper()
LOG_DB_ENABLED = _env_flag("CANDYSH_LOG_DB_ENABLED", "True")
VERBOSE_LOGGING = False

#* --- MODIFIABLE SETTINGS (Changeable at runtime via 'config' command) ---
MODIFIABLE_SETTINGS = {
    # Interpreter
    "PROMPT", "HISTORY_LIMIT",
    # Supervisor
    "SEARCH_PATH", "FOREGROUND_STOP_ENDS_WAIT", "REAP_TIMEOUT",
    # Logging
    "LOG_BUFFER_SIZE", "LOG_BUFFER_FLUSH_INTERVAL", "LOG_HISTORY_COUNT",
}

#* --- Default Values for Modifiable Settings ---
LOG_BUFFER_SIZE = 100
LOG_BUFFER_FLUSH_INTERVAL = 10
LOG_HISTORY_COUNT = 50
