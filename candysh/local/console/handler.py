import os
import time
import logging
from typing import List
from candysh.local import effective_settings as config
from candysh.local.database import LogDBManager
from candysh.local.console.history import CommandHistory
from candysh.local.supervisor import ProcessSupervisor, UserInputError
from candysh.local.supervisor.process_utils import get_process_status
from candysh.log import set_console_level, set_db_buffering

log = logging.getLogger(__name__)


def _require_program(args: List[str], message: str = "Missing program to run. Please try again") -> List[str]:
    if not args:
        raise UserInputError(message)
    return args


def _parse_pid(args: List[str]) -> int:
    try:
        pid = int(args[0]) if args else 0
    except ValueError:
        pid = 0
    if pid < 1:
        raise UserInputError("Missing or invalid process. Please try again")
    return pid


def _parse_repeat_count(args: List[str]) -> int:
    try:
        count = int(args[0]) if args else 0
    except ValueError:
        count = 0
    if count < 1:
        raise UserInputError("Missing or invalid number of repeats. Please try again")
    return count


#* --- Process Commands ---
def handle_run(supervisor: ProcessSupervisor, args: List[str]) -> None:
    """Runs a program in the foreground and reports how it ended."""
    argv = _require_program(args)
    outcome = supervisor.run_foreground(argv)
    print(outcome.describe())


def handle_background(supervisor: ProcessSupervisor, args: List[str]) -> None:
    """Starts a program in the background and prints its PID."""
    argv = _require_program(args, "Missing program. Please try again")
    handle = supervisor.run_background(argv)
    print(f"[{handle.pid}]")


def handle_repeat(supervisor: ProcessSupervisor, args: List[str]) -> None:
    """
    Handles 'repeat <n> <program> [args...]'.

    :param args: The count followed by the program and its arguments.
    """
    count = _parse_repeat_count(args)
    argv = _require_program(args[1:], "Missing program. Please try again")
    for handle in supervisor.repeat(count, argv):
        print(f"[{handle.pid}]")


def handle_exterminate(supervisor: ProcessSupervisor, args: List[str]) -> None:
    """Kills one registered background process."""
    pid = _parse_pid(args)
    supervisor.terminate(pid)
    print(f"[{pid}] was killed")


def handle_exterminate_all(supervisor: ProcessSupervisor) -> None:
    """Kills every registered background process and reports the totals."""
    if not supervisor.registry:
        print("No processes to kill")
        return

    print("Killing processes...\n")
    summary = supervisor.terminate_all()
    for pid, error in summary.results:
        if error is None:
            print(f"[{pid}] was killed")
        else:
            log.error(error.message)

    print(f"\nTotal of {summary.killed_count} processes killed")
    if summary.failed_count:
        print(f"{summary.failed_count} process(es) could not be killed and were removed from the list: "
              f"{', '.join(str(pid) for pid in summary.discarded)}")


def display_processes(supervisor: ProcessSupervisor) -> None:
    """Lists the registered background processes, oldest first."""
    if not supervisor.registry:
        print("No background processes.")
        return

    print("\n--- Background Processes ---")
    now = time.time()
    for handle in supervisor.registry:
        status = get_process_status(handle.pid)
        runtime = time.strftime('%H:%M:%S', time.gmtime(now - handle.started_at))
        print(f"  [{handle.pid:<8}] {status.upper():<8} | Up: {runtime} | {handle.command_line}")
    print("-" * 28 + "\n")


#* --- Collaborator Commands ---
def handle_changedir(args: List[str]) -> None:
    """Changes the interpreter's working directory."""
    if not args:
        raise UserInputError("Missing directory. Please try again")
    try:
        os.chdir(args[0])
    except OSError as e:
        log.error(f"changedir Error: {e.strerror or e}: '{args[0]}'")


def display_whereami() -> None:
    """Prints the current working directory."""
    try:
        print(os.getcwd())
    except OSError as e:
        log.error(f"whereami Error: {e.strerror or e}")


def handle_lastcommands(history: CommandHistory, args: List[str]) -> None:
    """Prints the command history, or clears it with '-c'."""
    if not args:
        for line in history.entries():
            print(line)
    elif args[0] == "-c":
        history.clear()
    else:
        raise UserInputError("Invalid parameter passed to lastcommands")


#* --- Interpreter Commands ---
def _config_show() -> None:
    """Displays the runtime-modifiable settings and their current values."""
    print("\n--- Current Interpreter Configuration ---")
    for key, value in config.modifiable_values().items():
        print(f"  {key} = {value!r}")
    print("---")
    print("Use 'config set <KEY> <VALUE>' to change a setting.")
    print("-----------------------------------------\n")


def _config_help() -> None:
    """Displays help for the config command."""
    print("\nConfig Command Help:")
    print("  config show                - Display all modifiable settings.")
    print("  config set KEY VALUE       - Change a setting and save it for later sessions.")
    print("  config help                - Show this help message.")


def _apply_live_setting(key: str, history: CommandHistory) -> None:
    """Pushes a changed setting into the objects that copied it at startup."""
    if key == "HISTORY_LIMIT":
        history.resize(config.HISTORY_LIMIT)
    elif key in ("LOG_BUFFER_SIZE", "LOG_BUFFER_FLUSH_INTERVAL"):
        if not set_db_buffering(config.LOG_BUFFER_SIZE, config.LOG_BUFFER_FLUSH_INTERVAL):
            log.debug("No SQLite log handler installed; buffer settings apply from the next start.")


def handle_config_command(args: List[str], history: CommandHistory) -> None:
    """
    Handles all sub-commands for the 'config' command.

    :param args: A list of string arguments following the 'config' command.
    :param history: The session history, resized when HISTORY_LIMIT changes.
    """
    sub_command = args[0].lower() if args else "show"

    if sub_command == "show":
        _config_show()
    elif sub_command == "set":
        if len(args) < 3:
            raise UserInputError("Usage: config set <SETTING_NAME> <VALUE>")
        # Values keep their spaces so prompts like "$ " survive tokenizing.
        updated, message = config.update_setting(args[1], " ".join(args[2:]))
        print(message)
        if updated:
            _apply_live_setting(args[1].upper(), history)
    elif sub_command == "help":
        _config_help()
    else:
        raise UserInputError(f"Unknown config sub-command: '{sub_command}'. Type 'config help' for available commands.")


def handle_logs_command() -> None:
    """Prints the most recent records from the log database."""
    if not config.LOG_DB_ENABLED or not config.LOG_DB_PATH.exists():
        print("Log database is not enabled or has no records yet.")
        return

    log_db = LogDBManager(config.LOG_DB_PATH)
    print(f"\n--- Displaying last {config.LOG_HISTORY_COUNT} log entries ---")
    for log_entry in log_db.fetch_last_entries(config.LOG_HISTORY_COUNT):
        print(log_entry.message)
    print()


def toggle_verbose_logging() -> None:
    """Toggles verbose (DEBUG level) logging for the console handler."""
    config.VERBOSE_LOGGING = not config.VERBOSE_LOGGING
    new_level = logging.DEBUG if config.VERBOSE_LOGGING else getattr(logging, config.CONSOLE_LOG_LEVEL, logging.WARNING)

    status = "ON" if config.VERBOSE_LOGGING else "OFF"
    if set_console_level(new_level):
        print(f"Verbose console logging is now {status}.")
        log.debug("Debug logging test: This message should only appear when verbose is ON.")
    else:
        print("Could not find console handler to modify level.")


def print_help() -> None:
    """Prints the main help text for the console."""
    print("\nAvailable commands:")
    print("  run <prog> [args...]        - Run a program and wait for it to finish.")
    print("  background <prog> [args...] - Run a program in the background and print its PID.")
    print("  repeat <n> <prog> [args...] - Run a program in the background n times.")
    print("  exterminate <pid>           - Kill a background process.")
    print("  exterminateall              - Kill every background process.")
    print("  processes                   - List the background processes.")
    print("  changedir <path>            - Change the working directory.")
    print("  whereami                    - Print the working directory.")
    print("  lastcommands [-c]           - Print (or clear with -c) the command history.")
    print("  config <cmd>                - Manage settings. Use 'config help' for more details.")
    print("  logs                        - Show recent log records.")
    print("  verbose                     - Toggle detailed DEBUG log output in the console.")
    print("  help                        - Show this help message.")
    print("  quit                        - Exit the interpreter.")
    print()
