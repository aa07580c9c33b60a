import sys
import logging
from typing import List, Optional

import setproctitle

# Basic console logger for messages BEFORE full setup is complete.
logging.basicConfig(
    level=logging.WARNING,
    format='%(levelname)s: %(message)s',
    stream=sys.stdout
)
log = logging.getLogger("candysh")

import candysh.local.console as console
from candysh.local import effective_settings as config
from candysh.local.supervisor import ForkError
from candysh.log.setup import setup_logging


def _console_level() -> int:
    return getattr(logging, config.CONSOLE_LOG_LEVEL, logging.WARNING)


def main(argv: Optional[List[str]] = None) -> int:
    """
    The main entry point for the interpreter.

    :param argv: Command-line arguments (defaults to sys.argv[1:]). When given,
                 they are run as a single command instead of starting the prompt.
    :return int: The process exit status.
    """
    argv = sys.argv[1:] if argv is None else list(argv)
    setproctitle.setproctitle(config.PROCESS_TITLE)
    setup_logging(_console_level())
    session = console.ConsoleSession()

    # Non-interactive mode for one-off commands
    if argv:
        if "--verbose" in argv:
            argv.remove("--verbose")
            console.toggle_verbose_logging()
        if not argv:
            return 0
        try:
            console.execute_command(session, argv[0].lower(), argv[1:])
        except ForkError as e:
            log.critical(f"{e.message}. Exiting.")
            return 1
        return 0

    # Interactive mode
    while True:
        try:
            line = input(config.PROMPT)
        except EOFError:
            print()
            log.debug("End of input. Exiting.")
            break
        except KeyboardInterrupt:
            print()
            continue

        try:
            if console.execute_line(session, line):
                break
        except KeyboardInterrupt:
            print()
        except ForkError as e:
            log.critical(f"{e.message}. Exiting.")
            return 1
        except Exception as e:
            log.error(f"An unexpected error occurred in the console: {e}", exc_info=True)
    return 0


def cli() -> None:
    """Console-script entry point."""
    status = main()
    logging.shutdown()
    sys.exit(status)


if __name__ == "__main__":
    cli()
