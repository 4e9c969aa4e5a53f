"""Tests for the Typer CLI.

Covers --version, config commands, the ask command and REPL launch via
CliRunner.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from deepchat import __version__
from deepchat.cli import app
from deepchat.providers.client import ChatAPIError

# NO_COLOR=1 prevents Rich from injecting ANSI codes inside option names,
# which breaks substring matching in CI (headless, no TTY).
# COLUMNS=200 prevents wrapping that could split a flag across lines.
runner = CliRunner(env={"NO_COLOR": "1", "COLUMNS": "200"})


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("DEEPSEEK_API_KEY", "sk-test")


@pytest.fixture(autouse=True)
def _no_env_files():
    with patch("deepchat.cli.load_keys_env"):
        yield


class TestVersionAndHelp:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"deepchat {__version__}" in result.output

    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "ask" in result.output
        assert "config" in result.output


class TestConfigCommands:
    def test_config_show(self):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "deepseek-chat" in result.output
        assert "https://api.deepseek.com/v1" in result.output

    def test_config_show_custom_file(self, tmp_path):
        path = tmp_path / "chat.toml"
        path.write_text('[chat]\nmodel = "deepseek-reasoner"\n', encoding="utf-8")
        result = runner.invoke(app, ["config", "show", "--config", str(path)])
        assert result.exit_code == 0
        assert "deepseek-reasoner" in result.output

    def test_config_show_missing_file(self, tmp_path):
        result = runner.invoke(app, ["config", "show", "--config", str(tmp_path / "x.toml")])
        assert result.exit_code == 1
        assert "Error loading config" in result.output

    def test_config_path(self):
        result = runner.invoke(app, ["config", "path"])
        assert result.exit_code == 0
        assert "defaults.toml" in result.output


class TestAsk:
    def test_missing_api_key(self, monkeypatch):
        monkeypatch.setenv("DEEPSEEK_API_KEY", "")
        result = runner.invoke(app, ["ask", "hello"])
        assert result.exit_code == 1
        assert "DEEPSEEK_API_KEY" in result.output

    def test_invalid_temperature(self, api_key):
        result = runner.invoke(app, ["ask", "hello", "--temperature", "2.5"])
        assert result.exit_code == 1
        assert "Invalid temperature" in result.output

    def test_invalid_max_tokens(self, api_key):
        result = runner.invoke(app, ["ask", "hello", "--max-tokens", "9000"])
        assert result.exit_code == 1
        assert "Invalid max_tokens" in result.output

    def test_sends_prompt(self, api_key):
        with patch(
            "deepchat.session.ChatSession.send", new_callable=AsyncMock,
        ) as send:
            result = runner.invoke(app, ["ask", "What is SSE?", "-t", "0.0"])
        assert result.exit_code == 0
        send.assert_awaited_once_with("What is SSE?")

    def test_api_error_exits(self, api_key):
        with patch(
            "deepchat.session.ChatSession.send",
            new_callable=AsyncMock,
            side_effect=ChatAPIError("HTTP error", status_code=402),
        ):
            result = runner.invoke(app, ["ask", "hello"])
        assert result.exit_code == 1
        assert "402" in result.output


class TestInteractive:
    def test_launches_repl(self, api_key):
        with patch("deepchat.repl.ChatREPL.run") as run:
            result = runner.invoke(app, ["--temperature", "1.3"])
        assert result.exit_code == 0
        run.assert_called_once()
        assert "Welcome to DeepSeek AI chat" in result.output
        assert "chat/translate" in result.output

    def test_repl_requires_key(self, monkeypatch):
        monkeypatch.setenv("DEEPSEEK_API_KEY", "")
        with patch("deepchat.repl.ChatREPL.run") as run:
            result = runner.invoke(app, [])
        assert result.exit_code == 1
        run.assert_not_called()
