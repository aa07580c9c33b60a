import os
import errno
import signal
import psutil
import logging
import threading
import subprocess
from contextlib import contextmanager
from typing import Iterator, List, Optional

from .errors import ExecError, ForkError, TerminateError, UserInputError, WaitError
from .models import ExitedNormally, KilledBySignal, Outcome, ProcessHandle, Stopped, returncode_to_outcome

log = logging.getLogger(__name__)

# errno values that mean the host could not create another process at all.
FORK_ERRNOS = {errno.EAGAIN, errno.ENOMEM}


#* --- Process Creation ---
def resolve_executable(program: str, search_path: bool) -> str:
    """
    Returns the executable Popen should run for a program name.

    With search_path, bare names are left for Popen to look up on PATH.
    Without it, bare names are pinned to the working directory.
    """
    if search_path or os.sep in program:
        return program
    return os.path.join(os.curdir, program)


def spawn_process(argv: List[str], search_path: bool = True, new_session: bool = False) -> subprocess.Popen:
    """
    Starts a child running argv[0] with argv as its arguments.
    The child inherits the terminal's file descriptors; there is no shell and no expansion.

    :param argv: Program followed by its arguments.
    :param search_path: Whether bare program names are looked up on PATH.
    :param new_session: Start the child in its own session, out of reach of
                        terminal signals such as Ctrl-C.
    :raises UserInputError: If argv is empty.
    :raises ForkError: If the host is out of process resources.
    :raises ExecError: If the program cannot be executed.
    """
    if not argv:
        raise UserInputError("Missing program to run. Please try again")

    executable = resolve_executable(argv[0], search_path)
    try:
        process = subprocess.Popen(argv, executable=executable, start_new_session=new_session)
    except OSError as e:
        if e.errno in FORK_ERRNOS:
            log.debug(f"Could not create a process for '{argv[0]}': {e}")
            raise ForkError(f"Process creation failed: {e.strerror}", argv, e.errno) from e
        log.debug(f"Exec of '{argv[0]}' failed: {e}")
        raise ExecError(f"Could not execute '{argv[0]}': {e.strerror or e}", argv, e.errno) from e
    log.debug(f"Spawned '{' '.join(argv)}' with PID {process.pid}.")
    return process


#* --- Foreground Waiting ---
def classify_status(status: int) -> Optional[Outcome]:
    """Classifies a raw waitpid status, or returns None for an unknown state change."""
    if os.WIFEXITED(status):
        return ExitedNormally(os.WEXITSTATUS(status))
    if os.WIFSIGNALED(status):
        return KilledBySignal(os.WTERMSIG(status))
    if os.WIFSTOPPED(status):
        return Stopped(os.WSTOPSIG(status))
    return None


def wait_for_child(pid: int, stop_ends_wait: bool = False) -> Outcome:
    """
    Blocks until the given child terminates and classifies how it ended.

    Interrupted waits are retried. A stopped child is reported and waited on
    again unless stop_ends_wait is set, in which case Stopped is returned.

    :raises WaitError: For any wait failure other than interruption.
    """
    while True:
        try:
            _, status = os.waitpid(pid, os.WUNTRACED)
        except InterruptedError:
            log.debug(f"Wait for PID {pid} interrupted by a signal. Retrying.")
            continue
        except OSError as e:
            log.debug(f"waitpid failed for PID {pid}: {e}")
            raise WaitError(f"waitpid: {e.strerror or e}", pid, e.errno) from e

        outcome = classify_status(status)
        if outcome is None:
            log.debug(f"Ignoring unrecognised status {status} for PID {pid}.")
            continue
        if isinstance(outcome, Stopped) and not stop_ends_wait:
            log.warning(f"{outcome.describe()} (PID {pid}). Still waiting for it to finish.")
            continue
        return outcome


@contextmanager
def ignore_interrupts() -> Iterator[None]:
    """
    Ignores SIGINT in the interpreter for the duration of a foreground wait,
    so Ctrl-C reaches the child without cancelling the wait.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


#* --- Termination ---
def kill_process(pid: int) -> None:
    """
    Sends SIGKILL to a process.

    :raises TerminateError: If the process does not exist or cannot be signalled.
    """
    try:
        psutil.Process(pid).kill()
    except psutil.NoSuchProcess as e:
        raise TerminateError(f"Exterminate error: no such process {pid}", pid) from e
    except psutil.AccessDenied as e:
        raise TerminateError(f"Exterminate error: permission denied for process {pid}", pid) from e


def reap_process(handle: ProcessHandle, timeout: float) -> Optional[Outcome]:
    """
    Collects the exit status of a killed background child.

    :return: The child's outcome, or None if it was not reaped within the timeout.
    """
    try:
        returncode = handle.process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        log.warning(f"Process {handle.pid} was signalled but not reaped within {timeout}s.")
        return None
    handle.outcome = returncode_to_outcome(returncode)
    log.debug(f"Reaped process {handle.pid}: {handle.outcome.describe()}")
    return handle.outcome


#* --- Process Status & Monitoring ---
def get_process_status(pid: int) -> str:
    """Gets a string representation of a process status."""
    try:
        status = psutil.Process(pid).status()
        if status == psutil.STATUS_ZOMBIE:
            return "exited"
        if status == psutil.STATUS_STOPPED:
            return "stopped"
        return "running"
    except psutil.NoSuchProcess:
        return "gone"
    except psutil.Error:
        return "unknown"
