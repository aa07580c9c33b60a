"""Tests for the low-level spawn, wait classification and kill helpers."""

import os
import signal

import psutil
import pytest

from candysh.local.supervisor import ExecError, ExitedNormally, KilledBySignal, Stopped, TerminateError, UserInputError
from candysh.local.supervisor import process_utils


class TestClassifyStatus:
    def test_exited(self):
        assert process_utils.classify_status(3 << 8) == ExitedNormally(3)

    def test_signaled(self):
        assert process_utils.classify_status(signal.SIGKILL) == KilledBySignal(signal.SIGKILL)

    def test_stopped(self):
        status = (signal.SIGTSTP << 8) | 0x7F
        assert process_utils.classify_status(status) == Stopped(signal.SIGTSTP)


class TestResolveExecutable:
    def test_search_path_leaves_bare_names_alone(self):
        assert process_utils.resolve_executable("ls", search_path=True) == "ls"

    def test_without_search_path_bare_names_are_local(self):
        assert process_utils.resolve_executable("ls", search_path=False) == os.path.join(os.curdir, "ls")

    def test_paths_are_never_rewritten(self):
        assert process_utils.resolve_executable("/bin/ls", search_path=False) == "/bin/ls"


class TestSpawn:
    def test_empty_argv_is_an_input_error(self):
        with pytest.raises(UserInputError):
            process_utils.spawn_process([])

    def test_missing_program(self):
        with pytest.raises(ExecError) as excinfo:
            process_utils.spawn_process(["/nonexistent/candysh-program"])
        assert excinfo.value.argv == ["/nonexistent/candysh-program"]

    def test_non_executable_file(self, tmp_path):
        script = tmp_path / "script.sh"
        script.write_text("#!/bin/sh\nexit 0\n")
        script.chmod(0o644)
        with pytest.raises(ExecError):
            process_utils.spawn_process([str(script)])

    def test_bare_name_without_path_search(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with pytest.raises(ExecError):
            process_utils.spawn_process(["true"], search_path=False)

    def test_resource_exhaustion_is_a_fork_error(self, monkeypatch):
        from candysh.local.supervisor import ForkError

        def exhausted(*args, **kwargs):
            raise BlockingIOError(11, "Resource temporarily unavailable")

        monkeypatch.setattr(process_utils.subprocess, "Popen", exhausted)
        with pytest.raises(ForkError):
            process_utils.spawn_process(["true"])


class TestKill:
    def test_missing_process(self, monkeypatch):
        def gone(pid):
            raise psutil.NoSuchProcess(pid)

        monkeypatch.setattr(process_utils.psutil, "Process", gone)
        with pytest.raises(TerminateError) as excinfo:
            process_utils.kill_process(4242)
        assert excinfo.value.pid == 4242

    def test_access_denied(self, monkeypatch):
        def denied(pid):
            raise psutil.AccessDenied(pid)

        monkeypatch.setattr(process_utils.psutil, "Process", denied)
        with pytest.raises(TerminateError):
            process_utils.kill_process(4242)


class TestIgnoreInterrupts:
    def test_handler_is_restored(self):
        before = signal.getsignal(signal.SIGINT)
        with process_utils.ignore_interrupts():
            assert signal.getsignal(signal.SIGINT) == signal.SIG_IGN
        assert signal.getsignal(signal.SIGINT) == before
