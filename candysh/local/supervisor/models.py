import time
import subprocess
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .errors import TerminateError


@dataclass(frozen=True)
class ExitedNormally:
    code: int

    def describe(self) -> str:
        return f"Process exited with value {self.code}"


@dataclass(frozen=True)
class KilledBySignal:
    signal_number: int

    def describe(self) -> str:
        return f"Process exited due to signal {self.signal_number}"


@dataclass(frozen=True)
class Stopped:
    signal_number: int

    def describe(self) -> str:
        return f"Process was stopped by signal {self.signal_number}"


Outcome = Union[ExitedNormally, KilledBySignal, Stopped]


def outcome_to_returncode(outcome: Outcome) -> Optional[int]:
    """Maps an outcome to the subprocess returncode convention (negative for signals)."""
    if isinstance(outcome, ExitedNormally):
        return outcome.code
    if isinstance(outcome, KilledBySignal):
        return -outcome.signal_number
    return None


def returncode_to_outcome(returncode: int) -> Outcome:
    """Inverse of outcome_to_returncode for a terminated child."""
    if returncode < 0:
        return KilledBySignal(-returncode)
    return ExitedNormally(returncode)


@dataclass
class ProcessHandle:
    """A background child tracked by the registry."""
    pid: int
    argv: List[str]
    process: subprocess.Popen
    started_at: float = field(default_factory=time.time)
    outcome: Optional[Outcome] = None

    @property
    def command_line(self) -> str:
        return " ".join(self.argv)


@dataclass
class TerminationSummary:
    """
    Result of one bulk termination pass.

    :ivar results: (pid, error) pairs in registry order; error is None for a confirmed kill.
    :ivar discarded: ids cleared from the registry without a confirmed kill.
    """
    results: List[Tuple[int, Optional[TerminateError]]] = field(default_factory=list)
    discarded: List[int] = field(default_factory=list)

    @property
    def killed_count(self) -> int:
        return sum(1 for _, error in self.results if error is None)

    @property
    def failed_count(self) -> int:
        return sum(1 for _, error in self.results if error is not None)
