"""
Exception hierarchy for the process supervisor and the console.

Errors local to a single command are reported and the interpreter keeps
running; only ForkError is treated as unrecoverable.
"""

from typing import List, Optional


class CandyShellError(Exception):
    """Base exception for the interpreter."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UserInputError(CandyShellError):
    """Missing or invalid command arguments. No state is changed."""


class SpawnError(CandyShellError):
    """A child process could not be created."""

    def __init__(self, message: str, argv: List[str], errno: Optional[int] = None):
        super().__init__(message)
        self.argv = argv
        self.errno = errno


class ForkError(SpawnError):
    """The host is out of process resources. Fatal to the interpreter."""


class ExecError(SpawnError):
    """The program could not be executed (bad path, permissions, format)."""


class WaitError(CandyShellError):
    """Waiting on a foreground child failed for a reason other than interruption."""

    def __init__(self, message: str, pid: int, errno: Optional[int] = None):
        super().__init__(message)
        self.pid = pid
        self.errno = errno


class TerminateError(CandyShellError):
    """The kill signal could not be delivered."""

    def __init__(self, message: str, pid: int):
        super().__init__(message)
        self.pid = pid


class ProcessNotFoundError(TerminateError):
    """The pid is not a registered background process."""
