"""Shared fixtures. The interpreter's home directory is redirected to a temp dir."""

import os
import tempfile

os.environ["CANDYSH_HOME"] = tempfile.mkdtemp(prefix="candysh-test-")
os.environ["CANDYSH_LOG_DB_ENABLED"] = "false"

import pytest

from candysh.local.console import ConsoleSession
from candysh.local.console.history import CommandHistory
from candysh.local.supervisor import ProcessRegistry, ProcessSupervisor


@pytest.fixture()
def supervisor():
    sup = ProcessSupervisor(registry=ProcessRegistry())
    yield sup
    for handle in sup.registry:
        if handle.process.returncode is None:
            handle.process.kill()
            handle.process.wait()


@pytest.fixture()
def session(supervisor):
    return ConsoleSession(supervisor=supervisor, history=CommandHistory(limit=10))
