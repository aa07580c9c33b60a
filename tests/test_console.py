"""Tests for the tokenizer, command history and the console dispatcher."""

import logging
import os

import pytest

from candysh.local import effective_settings
from candysh.local.console import execute_command, execute_line
from candysh.local.console.history import CommandHistory
from candysh.local.console.tokenizer import tokenize
from candysh.local.supervisor import ForkError
from candysh.local.supervisor import process_utils
from candysh.log.handler import SQLiteHandler


class TestTokenize:
    def test_splits_on_spaces(self):
        assert tokenize("run /bin/echo hello") == ["run", "/bin/echo", "hello"]

    def test_collapses_repeated_spaces_and_strips_newline(self):
        assert tokenize("  background   sleep 5 \r\n") == ["background", "sleep", "5"]

    def test_blank_line(self):
        assert tokenize("   ") == []

    def test_quotes_are_not_special(self):
        assert tokenize('run echo "a b"') == ["run", "echo", '"a', 'b"']


class TestCommandHistory:
    def test_keeps_at_most_limit_entries(self):
        history = CommandHistory(limit=2)
        for line in ("one", "two", "three"):
            history.record(line)
        assert history.entries() == ["two", "three"]

    def test_clear(self):
        history = CommandHistory()
        history.record("whereami")
        assert history.clear() == 1
        assert len(history) == 0

    def test_shrinking_drops_the_oldest_entries(self):
        history = CommandHistory(limit=5)
        for line in ("one", "two", "three", "four"):
            history.record(line)
        history.resize(2)
        assert history.entries() == ["three", "four"]
        history.record("five")
        assert history.entries() == ["four", "five"]


class TestProcessCommands:
    def test_background_then_exterminate_twice(self, session, capsys, caplog):
        execute_line(session, "background sleep 100")
        pid = session.supervisor.registry.ids()[0]
        assert f"[{pid}]" in capsys.readouterr().out

        execute_line(session, f"exterminate {pid}")
        assert f"[{pid}] was killed" in capsys.readouterr().out
        assert pid not in session.supervisor.registry

        with caplog.at_level(logging.ERROR):
            execute_line(session, f"exterminate {pid}")
        assert "not a background process" in caplog.text

    def test_run_prints_exit_value(self, session, capsys):
        execute_line(session, "run false")
        assert "Process exited with value 1" in capsys.readouterr().out

    def test_run_without_program(self, session, capsys):
        execute_line(session, "run")
        assert "Missing program to run. Please try again" in capsys.readouterr().out

    def test_run_missing_program_is_reported(self, session, caplog):
        with caplog.at_level(logging.ERROR):
            assert execute_line(session, "run /nonexistent/candysh-program") is False
        assert "Could not execute" in caplog.text

    def test_repeat_spawns_n_processes(self, session, capsys):
        execute_line(session, "repeat 3 true")
        out = capsys.readouterr().out
        pids = session.supervisor.registry.ids()
        assert len(pids) == 3
        assert out.split() == [f"[{pid}]" for pid in pids]

    @pytest.mark.parametrize("line", ["repeat", "repeat 0 true", "repeat -2 true", "repeat x true"])
    def test_repeat_rejects_bad_counts(self, session, capsys, line):
        execute_line(session, line)
        assert "Missing or invalid number of repeats" in capsys.readouterr().out
        assert len(session.supervisor.registry) == 0

    def test_repeat_without_program(self, session, capsys):
        execute_line(session, "repeat 2")
        assert "Missing program. Please try again" in capsys.readouterr().out

    @pytest.mark.parametrize("line", ["exterminate", "exterminate abc", "exterminate -5", "exterminate 0", "exterminate ²"])
    def test_exterminate_rejects_bad_pids(self, session, capsys, line):
        execute_line(session, line)
        assert "Missing or invalid process. Please try again" in capsys.readouterr().out

    def test_exterminateall_with_nothing_running(self, session, capsys):
        execute_line(session, "exterminateall")
        assert "No processes to kill" in capsys.readouterr().out

    def test_exterminateall_reports_total(self, session, capsys):
        execute_line(session, "repeat 2 sleep 100")
        capsys.readouterr()
        execute_line(session, "exterminateall")
        out = capsys.readouterr().out
        assert "Killing processes..." in out
        assert "Total of 2 processes killed" in out
        assert len(session.supervisor.registry) == 0

    def test_processes_lists_registry(self, session, capsys):
        execute_line(session, "background sleep 100")
        pid = session.supervisor.registry.ids()[0]
        capsys.readouterr()
        execute_line(session, "processes")
        out = capsys.readouterr().out
        assert str(pid) in out
        assert "sleep 100" in out

    def test_fork_error_escapes_the_dispatcher(self, session, monkeypatch):
        def exhausted(argv, **kwargs):
            raise ForkError("Process creation failed: Resource temporarily unavailable", argv)

        monkeypatch.setattr(process_utils, "spawn_process", exhausted)
        with pytest.raises(ForkError):
            execute_command(session, "background", ["sleep", "1"])


class TestCollaboratorCommands:
    def test_whereami(self, session, capsys, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        execute_line(session, "whereami")
        assert capsys.readouterr().out.strip() == os.getcwd()

    def test_changedir(self, session, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "sub").mkdir()
        execute_line(session, "changedir sub")
        assert os.getcwd() == str((tmp_path / "sub").resolve())

    def test_changedir_to_missing_directory(self, session, caplog, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        with caplog.at_level(logging.ERROR):
            execute_line(session, "changedir nowhere")
        assert "changedir Error" in caplog.text
        assert os.getcwd() == str(tmp_path.resolve())

    def test_lastcommands_lists_and_clears(self, session, capsys):
        execute_line(session, "whereami")
        capsys.readouterr()
        execute_line(session, "lastcommands")
        assert capsys.readouterr().out.splitlines() == ["whereami", "lastcommands"]

        execute_line(session, "lastcommands -c")
        assert len(session.history) == 0

    def test_lastcommands_bad_parameter(self, session, capsys):
        execute_line(session, "lastcommands -x")
        assert "Invalid parameter passed to lastcommands" in capsys.readouterr().out


class TestInterpreterCommands:
    def test_unknown_command(self, session, capsys):
        assert execute_line(session, "frobnicate") is False
        assert "Invalid command. Please try again" in capsys.readouterr().out

    def test_blank_line_is_not_recorded(self, session):
        assert execute_line(session, "   ") is False
        assert len(session.history) == 0

    def test_quit_exits_and_releases_history(self, session):
        execute_line(session, "whereami")
        assert execute_line(session, "quit") is True
        assert len(session.history) == 0

    def test_config_set(self, session, capsys, monkeypatch):
        monkeypatch.setattr(effective_settings, "REAP_TIMEOUT", effective_settings.REAP_TIMEOUT)
        execute_line(session, "config set reap_timeout 0.5")
        assert effective_settings.REAP_TIMEOUT == 0.5
        assert "REAP_TIMEOUT" in capsys.readouterr().out

    def test_history_limit_applies_immediately(self, session, monkeypatch):
        monkeypatch.setattr(effective_settings, "HISTORY_LIMIT", effective_settings.HISTORY_LIMIT)
        execute_line(session, "config set HISTORY_LIMIT 2")
        for _ in range(5):
            execute_line(session, "whereami")
        assert session.history.entries() == ["whereami", "whereami"]
        assert session.history.limit == 2

    def test_rejected_history_limit_leaves_history_alone(self, session, monkeypatch):
        monkeypatch.setattr(effective_settings, "HISTORY_LIMIT", effective_settings.HISTORY_LIMIT)
        execute_line(session, "config set HISTORY_LIMIT lots")
        assert session.history.limit == 10

    def test_log_buffer_settings_reach_the_running_handler(self, session, monkeypatch, tmp_path):
        monkeypatch.setattr(effective_settings, "LOG_BUFFER_SIZE", effective_settings.LOG_BUFFER_SIZE)
        handler = SQLiteHandler(db_path=tmp_path / "logs.db", buffer_size=100, flush_interval=60)
        monkeypatch.setattr(logging.getLogger(), "handlers", [handler])
        try:
            execute_line(session, "config set LOG_BUFFER_SIZE 5")
            assert handler.buffer_size == 5
        finally:
            handler.close()

    def test_config_set_usage(self, session, capsys):
        execute_line(session, "config set PROMPT")
        assert "Usage: config set" in capsys.readouterr().out
