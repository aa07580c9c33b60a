import logging
from typing import Any, List, Optional

from candysh.local import effective_settings
from candysh.local.supervisor import process_utils
from .errors import ProcessNotFoundError, TerminateError
from .models import Outcome, ProcessHandle, TerminationSummary, outcome_to_returncode
from .registry import ProcessRegistry

log = logging.getLogger(__name__)


class ProcessSupervisor:
    """
    Launches programs in the foreground or background and tracks the
    background ones by pid until they are terminated.

    The supervisor owns its ProcessRegistry and is driven from a single
    thread; none of its operations are synchronized.
    """

    def __init__(self, registry: Optional[ProcessRegistry] = None, config: Any = None) -> None:
        """
        :param registry: The registry to manage. A new empty one is created if omitted.
        :param config: Settings object; defaults to the merged runtime settings.
        """
        self.registry = registry if registry is not None else ProcessRegistry()
        self.config = config if config is not None else effective_settings

    def run_foreground(self, argv: List[str], stop_ends_wait: Optional[bool] = None) -> Outcome:
        """
        Runs a program and blocks until it finishes. The child is never registered.

        :param argv: Program followed by its arguments.
        :param stop_ends_wait: Overrides FOREGROUND_STOP_ENDS_WAIT for this call.
        :return: How the child ended.
        :raises SpawnError: If the child could not be started.
        :raises WaitError: If waiting on the child failed.
        """
        if stop_ends_wait is None:
            stop_ends_wait = self.config.FOREGROUND_STOP_ENDS_WAIT

        process = process_utils.spawn_process(argv, search_path=self.config.SEARCH_PATH)
        log.info(f"Running '{' '.join(argv)}' in the foreground (PID {process.pid}).")
        with process_utils.ignore_interrupts():
            outcome = process_utils.wait_for_child(process.pid, stop_ends_wait=stop_ends_wait)

        # The child is reaped; keep the Popen object from waiting on it again.
        returncode = outcome_to_returncode(outcome)
        if returncode is not None:
            process.returncode = returncode
        log.info(f"Foreground PID {process.pid}: {outcome.describe()}")
        return outcome

    def run_background(self, argv: List[str]) -> ProcessHandle:
        """
        Starts a program without waiting for it and registers it. The child runs in
        its own session so Ctrl-C at the terminal does not reach it.

        :return: The handle of the registered child.
        :raises SpawnError: If the child could not be started.
        """
        process = process_utils.spawn_process(argv, search_path=self.config.SEARCH_PATH, new_session=True)
        handle = ProcessHandle(pid=process.pid, argv=list(argv), process=process)
        self.registry.insert(handle)
        log.info(f"Started background process {handle.pid} ({handle.command_line}).")
        return handle

    def repeat(self, count: int, argv: List[str]) -> List[ProcessHandle]:
        """
        Starts the same program in the background `count` times, one after another.
        A count below 1 does nothing.

        :return: The handles in spawn order.
        """
        handles: List[ProcessHandle] = []
        for _ in range(count):
            handles.append(self.run_background(argv))
        if handles:
            log.info(f"Repeated '{' '.join(argv)}' {len(handles)} time(s).")
        return handles

    def terminate(self, pid: int) -> ProcessHandle:
        """
        Kills a registered background process and removes it from the registry.

        :return: The removed handle, with its reaped outcome when available.
        :raises ProcessNotFoundError: If the pid is not registered.
        :raises TerminateError: If the signal could not be delivered; the registry is unchanged.
        """
        handle = self.registry.get(pid)
        if handle is None:
            raise ProcessNotFoundError(f"Exterminate error: process {pid} is not a background process", pid)

        try:
            process_utils.kill_process(pid)
        except TerminateError as e:
            log.debug(f"Kill failed for registered process {pid}: {e.message}")
            raise

        self.registry.remove(pid)
        process_utils.reap_process(handle, timeout=self.config.REAP_TIMEOUT)
        log.info(f"Process {pid} was killed.")
        return handle

    def terminate_all(self) -> TerminationSummary:
        """
        Kills every registered process, in registry order, continuing past
        failures. The registry is always empty afterwards.
        """
        summary = TerminationSummary()
        for pid in self.registry.ids():
            try:
                self.terminate(pid)
            except TerminateError as e:
                summary.results.append((pid, e))
            else:
                summary.results.append((pid, None))

        summary.discarded = self.registry.clear()
        if summary.discarded:
            log.info(f"Discarded {len(summary.discarded)} registry entries that could not be killed: {summary.discarded}")
        log.info(f"Terminated {summary.killed_count} of {len(summary.results)} background processes.")
        return summary
