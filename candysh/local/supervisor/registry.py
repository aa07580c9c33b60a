import logging
from typing import Iterator, List, Optional

from .models import ProcessHandle

log = logging.getLogger(__name__)


class ProcessRegistry:
    """
    Ordered collection of live background processes.

    Entries keep insertion order (newest at the tail). The registry is owned by
    a single ProcessSupervisor and is not synchronized.
    """

    def __init__(self) -> None:
        self._handles: List[ProcessHandle] = []

    def insert(self, handle: ProcessHandle) -> None:
        self._handles.append(handle)
        log.debug(f"Registered background process {handle.pid} ({handle.command_line}).")

    def remove(self, pid: int) -> Optional[ProcessHandle]:
        """
        Removes the first entry with the given pid.

        :return: The removed handle, or None if the pid was not registered.
        """
        for index, handle in enumerate(self._handles):
            if handle.pid == pid:
                del self._handles[index]
                log.debug(f"Unregistered background process {pid}.")
                return handle
        return None

    def clear(self) -> List[int]:
        """Empties the registry and returns the removed ids in insertion order."""
        removed = [handle.pid for handle in self._handles]
        self._handles.clear()
        return removed

    def get(self, pid: int) -> Optional[ProcessHandle]:
        return next((handle for handle in self._handles if handle.pid == pid), None)

    def ids(self) -> List[int]:
        """Snapshot of the registered ids."""
        return [handle.pid for handle in self._handles]

    def __iter__(self) -> Iterator[ProcessHandle]:
        return iter(list(self._handles))

    def __contains__(self, pid: object) -> bool:
        return any(handle.pid == pid for handle in self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    def __bool__(self) -> bool:
        return bool(self._handles)
