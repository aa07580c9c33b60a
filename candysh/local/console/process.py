import logging
from dataclasses import dataclass, field
from typing import List
from candysh.local import effective_settings as config
from candysh.local.console.history import CommandHistory
from candysh.local.console.tokenizer import tokenize
from candysh.local.console.handler import (
    display_processes, display_whereami, handle_background, handle_changedir,
    handle_config_command, handle_exterminate, handle_exterminate_all, handle_lastcommands,
    handle_logs_command, handle_repeat, handle_run, print_help, toggle_verbose_logging,
)
from candysh.local.supervisor import CandyShellError, ForkError, ProcessSupervisor, UserInputError

log = logging.getLogger(__name__)


@dataclass
class ConsoleSession:
    """State shared by the commands of one interpreter session."""
    supervisor: ProcessSupervisor = field(default_factory=ProcessSupervisor)
    history: CommandHistory = field(default_factory=lambda: CommandHistory(config.HISTORY_LIMIT))


def execute_command(session: ConsoleSession, command: str, args: List[str]) -> bool:
    """
    Executes a single command from the user.

    Errors local to the command are reported here; a ForkError is not, since
    the interpreter cannot go on creating processes.

    :param session: The session whose supervisor and history the command uses.
    :param command: The command name (first token of the line).
    :param args: The remaining tokens.
    :return bool: True if the interpreter should exit, False otherwise.
    """
    log.debug(f"Executing command: {command}, args: {args}")
    supervisor = session.supervisor
    command_map = {
        "run": lambda: handle_run(supervisor, args),
        "background": lambda: handle_background(supervisor, args),
        "repeat": lambda: handle_repeat(supervisor, args),
        "exterminate": lambda: handle_exterminate(supervisor, args),
        "exterminateall": lambda: handle_exterminate_all(supervisor),
        "processes": lambda: display_processes(supervisor),
        "changedir": lambda: handle_changedir(args),
        "whereami": display_whereami,
        "lastcommands": lambda: handle_lastcommands(session.history, args),
        "config": lambda: handle_config_command(args, session.history),
        "logs": handle_logs_command,
        "verbose": toggle_verbose_logging,
        "help": print_help,
    }

    if command == "quit":
        session.history.clear()
        if supervisor.registry:
            log.info(f"Leaving {len(supervisor.registry)} background process(es) running: {supervisor.registry.ids()}")
        return True

    if command not in command_map:
        print("Invalid command. Please try again")
        return False

    try:
        command_map[command]()
    except ForkError:
        raise
    except UserInputError as e:
        print(e.message)
    except CandyShellError as e:
        log.error(e.message)
    return False


def execute_line(session: ConsoleSession, line: str) -> bool:
    """
    Records a raw command line in the history, tokenizes it and executes it.

    :return bool: True if the interpreter should exit.
    """
    tokens = tokenize(line)
    if not tokens:
        return False
    session.history.record(line.strip("\r\n"))
    return execute_command(session, tokens[0], tokens[1:])
