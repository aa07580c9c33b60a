import logging
from collections import deque
from typing import Deque, List

log = logging.getLogger(__name__)


class CommandHistory:
    """Raw text of the command lines accepted during the session, oldest first."""

    def __init__(self, limit: int = 1024) -> None:
        self._commands: Deque[str] = deque(maxlen=max(limit, 1))

    def resize(self, limit: int) -> None:
        """Changes the limit, dropping the oldest commands that no longer fit."""
        self._commands = deque(self._commands, maxlen=max(limit, 1))

    @property
    def limit(self) -> int:
        return self._commands.maxlen

    def record(self, line: str) -> None:
        self._commands.append(line)

    def entries(self) -> List[str]:
        return list(self._commands)

    def clear(self) -> int:
        """Forgets every recorded command and returns how many there were."""
        count = len(self._commands)
        self._commands.clear()
        log.debug(f"Cleared {count} command(s) from history.")
        return count

    def __len__(self) -> int:
        return len(self._commands)
