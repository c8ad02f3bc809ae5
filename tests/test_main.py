"""Tests for the command line entry point."""

import os
import signal
import threading

import pytest

import room_publisher.main as main_mod
from room_publisher.app_config import reset_app_environ_config
from room_publisher.main import main, parse_args
from room_publisher.utils.app_errors import AppErrorCode, UsageError
from tests.fixtures.publisher_fixtures import FakeSession, alive_capture_threads


def _forbid_sessions(monkeypatch: pytest.MonkeyPatch) -> None:
    def _no_session(*args, **kwargs):
        raise AssertionError("no session may be created")

    monkeypatch.setattr(main_mod, "LivekitSession", _no_session)


class TestSelfTest:
    def test_prints_ok_and_exits_0(self, capsys, monkeypatch):
        _forbid_sessions(monkeypatch)

        assert main(["--self-test"]) == 0

        assert capsys.readouterr().out == "self-test ok\n"

    def test_needs_no_credentials(self, capsys):
        assert main(["--self-test", "--url", "wss://ignored"]) == 0
        assert capsys.readouterr().out == "self-test ok\n"

    def test_leaves_runtime_shut_down(self):
        main(["--self-test"])
        assert main_mod.livekit_runtime.is_initialized is False


class TestUsage:
    def test_no_args_no_env_prints_usage_and_exits_1(self, capsys, monkeypatch):
        _forbid_sessions(monkeypatch)

        assert main([]) == 1

        err = capsys.readouterr().err
        assert "Usage:" in err
        assert "--url <ws-url> --token <token>" in err
        assert "LIVEKIT_URL, LIVEKIT_TOKEN" in err

    @pytest.mark.parametrize("flag", ["-h", "--help"])
    def test_help_exits_1_on_stderr(self, capsys, flag):
        assert main([flag]) == 1
        captured = capsys.readouterr()
        assert "Usage:" in captured.err
        assert captured.out == ""

    def test_missing_token_exits_1(self, capsys, monkeypatch):
        _forbid_sessions(monkeypatch)
        assert main(["--url", "wss://rtc.example.test"]) == 1
        assert "Usage:" in capsys.readouterr().err

    def test_flag_without_value_exits_1(self, capsys):
        assert main(["--token", "tok", "--url"]) == 1
        assert "Usage:" in capsys.readouterr().err


class TestParseArgs:
    def test_space_and_equals_forms(self):
        options = parse_args(["--url=wss://a.test", "--token", "tok"])
        assert options.url == "wss://a.test"
        assert options.token == "tok"
        assert options.self_test is False

    def test_unknown_arguments_are_ignored(self):
        options = parse_args(["--verbose", "--url", "wss://a.test", "--token=tok", "extra"])
        assert (options.url, options.token) == ("wss://a.test", "tok")

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("LIVEKIT_URL", "wss://env.test")
        monkeypatch.setenv("LIVEKIT_TOKEN", "env-token")
        reset_app_environ_config()

        options = parse_args([])

        assert (options.url, options.token) == ("wss://env.test", "env-token")

    def test_flags_take_precedence_over_env(self, monkeypatch):
        monkeypatch.setenv("LIVEKIT_URL", "wss://env.test")
        monkeypatch.setenv("LIVEKIT_TOKEN", "env-token")
        reset_app_environ_config()

        options = parse_args(["--url", "wss://flag.test"])

        assert (options.url, options.token) == ("wss://flag.test", "env-token")

    def test_empty_env_counts_as_missing(self, monkeypatch):
        monkeypatch.setenv("LIVEKIT_URL", "   ")
        reset_app_environ_config()

        with pytest.raises(UsageError) as exc_info:
            parse_args(["--token", "tok"])

        assert exc_info.value.errcode == AppErrorCode.E_MISSING_ARGUMENT.value


class TestConnectFailure:
    def test_failed_connect_exits_1(self, capsys, monkeypatch):
        sessions: list[FakeSession] = []

        def _session_factory():
            session = FakeSession(connect_ok=False)
            sessions.append(session)
            return session

        monkeypatch.setattr(main_mod, "LivekitSession", _session_factory)

        assert main(["--url", "wss://rtc.example.test", "--token", "tok"]) == 1

        captured = capsys.readouterr()
        assert "Failed to connect" in captured.err
        assert "Connecting to: wss://rtc.example.test" in captured.out
        assert sessions[0].events[0] == ("connect", "wss://rtc.example.test", "tok")
        assert main_mod.livekit_runtime.is_initialized is False


class TestSelfTestAndHelpOrder:
    def test_self_test_before_help_wins(self, capsys):
        assert main(["--self-test", "-h"]) == 0
        captured = capsys.readouterr()
        assert captured.out == "self-test ok\n"
        assert "Usage:" not in captured.err

    def test_help_before_self_test_wins(self, capsys):
        assert main(["--help", "--self-test"]) == 1
        captured = capsys.readouterr()
        assert "Usage:" in captured.err
        assert "self-test ok" not in captured.out


class TestSignalDrivenRun:
    def test_sigint_drains_and_exits_0(self, capsys, monkeypatch):
        sessions: list[FakeSession] = []

        def _session_factory():
            session = FakeSession()
            sessions.append(session)
            return session

        monkeypatch.setattr(main_mod, "LivekitSession", _session_factory)
        original_sigint = signal.getsignal(signal.SIGINT)
        original_sigterm = signal.getsignal(signal.SIGTERM)

        timer = threading.Timer(0.3, os.kill, args=(os.getpid(), signal.SIGINT))
        timer.start()
        try:
            exit_code = main(["--url", "wss://rtc.example.test", "--token", "tok"])
        finally:
            timer.cancel()

        assert exit_code == 0

        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "Connecting to: wss://rtc.example.test"
        assert "Connected." in lines
        assert lines[-1] == "Exiting."

        session = sessions[0]
        assert [event[0] for event in session.events] == [
            "connect",
            "publish",
            "publish",
            "unpublish",
            "unpublish",
            "close",
        ]
        assert session.threads_alive_at_unpublish == []
        assert session.threads_alive_at_close == []
        assert alive_capture_threads() == []

        assert signal.getsignal(signal.SIGINT) is original_sigint
        assert signal.getsignal(signal.SIGTERM) is original_sigterm
        assert main_mod.livekit_runtime.is_initialized is False
