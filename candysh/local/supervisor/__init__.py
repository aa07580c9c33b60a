"""
The Supervisor package.
Manages the interpreter's child processes.

This package contains the central ProcessSupervisor class and its helper
modules, which together handle spawning, waiting on, tracking and
terminating the programs launched from the console.
"""
from .errors import (
    CandyShellError, ExecError, ForkError, ProcessNotFoundError,
    SpawnError, TerminateError, UserInputError, WaitError,
)
from .models import ExitedNormally, KilledBySignal, Outcome, ProcessHandle, Stopped, TerminationSummary
from .registry import ProcessRegistry
from .supervisor import ProcessSupervisor

__all__ = [
    'ProcessSupervisor', 'ProcessRegistry', 'ProcessHandle', 'TerminationSummary',
    'Outcome', 'ExitedNormally', 'KilledBySignal', 'Stopped',
    'CandyShellError', 'UserInputError', 'SpawnError', 'ForkError', 'ExecError',
    'WaitError', 'TerminateError', 'ProcessNotFoundError',
]
