"""Tests for the click command-line interface."""

import logging

import pytest
from click.testing import CliRunner

from zsh_ai_suggestions import __version__
from zsh_ai_suggestions import daemon as daemon_module
from zsh_ai_suggestions import repl as repl_module
from zsh_ai_suggestions import server as server_module
from zsh_ai_suggestions.cli import cli
from zsh_ai_suggestions.config import Provider
from zsh_ai_suggestions.log import PACKAGE_LOGGER


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def captured(monkeypatch):
    """Replace the front-end entry points; record the settings they get."""
    calls = {}

    def fake(name, code=0):
        def main(settings, *args, **kwargs):
            calls[name] = settings
            return code
        return main

    monkeypatch.setattr(daemon_module, "main", fake("daemon"))
    monkeypatch.setattr(server_module, "main", fake("server"))
    monkeypatch.setattr(repl_module, "main", fake("repl"))
    return calls


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_sweep_removes_stale_files(runner, shared_dir):
    for name in ("zsh-ai-input-1", "zsh-ai-input-2.tmp", "zsh-ai-output-3"):
        (shared_dir / name).write_text("x")

    result = runner.invoke(cli, ["sweep", "--tmpdir", str(shared_dir)])

    assert result.exit_code == 0
    assert f"Removed 2 files from {shared_dir}" in result.output
    assert [p.name for p in shared_dir.iterdir()] == ["zsh-ai-output-3"]


def test_sweep_all(runner, shared_dir):
    (shared_dir / "zsh-ai-output-3").write_text("x")

    result = runner.invoke(cli, ["sweep", "--all", "--tmpdir", str(shared_dir)])

    assert result.exit_code == 0
    assert "Removed 1 file from" in result.output
    assert list(shared_dir.iterdir()) == []


def test_sweep_reads_tmpdir_from_env(runner, shared_dir, monkeypatch):
    (shared_dir / "zsh-ai-input-1").write_text("x")
    monkeypatch.setenv("ZSH_AI_SUGGESTIONS_TMPDIR", str(shared_dir))

    result = runner.invoke(cli, ["sweep"])

    assert result.exit_code == 0
    assert list(shared_dir.iterdir()) == []


def test_daemon_passes_overrides(runner, captured, shared_dir):
    result = runner.invoke(cli, [
        "daemon", "--type", "ollama", "--tmpdir", str(shared_dir), "--no-cleanup-on-exit",
    ])

    assert result.exit_code == 0
    settings = captured["daemon"]
    assert settings.provider is Provider.OLLAMA
    assert settings.tmpdir == shared_dir
    assert settings.cleanup_on_exit is False


def test_daemon_defaults_from_env(runner, captured, monkeypatch):
    monkeypatch.setenv("ZSH_AI_SUGGESTIONS_TYPE", "gemini")
    monkeypatch.setenv("ZSH_AI_SUGGESTIONS_CLEANUP_ON_EXIT", "false")

    result = runner.invoke(cli, ["daemon"])

    assert result.exit_code == 0
    assert captured["daemon"].provider is Provider.GEMINI
    assert captured["daemon"].cleanup_on_exit is False


def test_daemon_exit_code_propagates(runner, monkeypatch):
    monkeypatch.setattr(daemon_module, "main", lambda settings: 1)
    result = runner.invoke(cli, ["daemon"])
    assert result.exit_code == 1


def test_unknown_type_option(runner, captured):
    result = runner.invoke(cli, ["daemon", "--type", "bogus"])
    assert result.exit_code == 2
    assert "daemon" not in captured


def test_unknown_type_from_env(runner, monkeypatch, shared_dir):
    monkeypatch.setenv("ZSH_AI_SUGGESTIONS_TYPE", "bogus")

    result = runner.invoke(cli, ["sweep", "--tmpdir", str(shared_dir)])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_server_port(runner, captured):
    result = runner.invoke(cli, ["server", "-p", "6000"])
    assert result.exit_code == 0
    assert captured["server"].server_port == 6000


def test_repl(runner, captured):
    result = runner.invoke(cli, ["repl", "-t", "llm"])
    assert result.exit_code == 0
    assert captured["repl"].provider is Provider.LLM


def test_log_level_option(runner, captured):
    result = runner.invoke(cli, ["--log-level", "debug", "repl"])
    assert result.exit_code == 0
    assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG


def test_log_level_from_env(runner, captured, monkeypatch):
    monkeypatch.setenv("ZSH_AI_SUGGESTIONS_LOG_LEVEL", "error")
    result = runner.invoke(cli, ["repl"])
    assert result.exit_code == 0
    assert logging.getLogger(PACKAGE_LOGGER).level == logging.ERROR


def test_type_option_beats_env(runner, captured, monkeypatch):
    monkeypatch.setenv("ZSH_AI_SUGGESTIONS_TYPE", "gemini")
    result = runner.invoke(cli, ["daemon", "--type", "ollama"])
    assert result.exit_code == 0
    assert captured["daemon"].provider is Provider.OLLAMA


def test_port_option_beats_env(runner, captured, monkeypatch):
    monkeypatch.setenv("SERVER_PORT", "6000")
    monkeypatch.setenv("ZSH_AI_SUGGESTIONS_SERVER_PORT", "7000")
    result = runner.invoke(cli, ["server", "--port", "8080"])
    assert result.exit_code == 0
    assert captured["server"].server_port == 8080
