from __future__ import annotations

import pytest

pytest.importorskip("PyQt6.QtWidgets")

from replay_overlay import launcher  # noqa: E402


def test_pipe_argument_wins_over_environment(monkeypatch):
    monkeypatch.setenv(launcher.PIPE_ENV_VAR, "FromEnv")
    assert launcher.resolve_pipe_name("FromArgs") == "FromArgs"


def test_environment_override_is_trimmed(monkeypatch):
    monkeypatch.setenv(launcher.PIPE_ENV_VAR, "  FromEnv \n")
    assert launcher.resolve_pipe_name(None) == "FromEnv"


def test_blank_environment_falls_back_to_default(monkeypatch):
    monkeypatch.setenv(launcher.PIPE_ENV_VAR, "   ")
    assert launcher.resolve_pipe_name(None) == launcher.DEFAULT_PIPE_NAME
    monkeypatch.delenv(launcher.PIPE_ENV_VAR)
    assert launcher.resolve_pipe_name("") == launcher.DEFAULT_PIPE_NAME


def test_parser_defaults():
    args = launcher.build_parser().parse_args([])
    assert args.pipe is None
    assert args.tick_ms == 16
    assert args.debug_config is None


def test_parser_accepts_overrides():
    args = launcher.build_parser().parse_args(["--pipe", "Alt", "--tick-ms", "33", "--debug-config", "/tmp/debug.json"])
    assert args.pipe == "Alt"
    assert args.tick_ms == 33
    assert args.debug_config == "/tmp/debug.json"
