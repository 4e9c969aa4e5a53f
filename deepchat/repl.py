"""Interactive REPL for deepchat.

Reads user lines, dispatches slash commands that adjust the session's
sampling settings, and streams a reply for everything else. Launch with
``deepchat`` (no subcommand).
"""

from __future__ import annotations

import asyncio
import logging

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from deepchat.cli_display import BRAND, render_help
from deepchat.presets import format_modes, resolve_mode
from deepchat.schemas.config import (
    MAX_MAX_TOKENS,
    MAX_TEMPERATURE,
    MIN_MAX_TOKENS,
    MIN_TEMPERATURE,
    ChatSettings,
)
from deepchat.session import ChatSession

logger = logging.getLogger(__name__)

_EXIT_COMMANDS = {"/exit", "/quit"}


class ChatREPL:
    """Interactive loop around a ChatSession.

    Slash commands change ``session.settings`` in place; every other
    non-blank line is sent as a chat turn.
    """

    def __init__(self, session: ChatSession, *, console: Console | None = None) -> None:
        self.session = session
        self.console = console or session.console

    @property
    def settings(self) -> ChatSettings:
        return self.session.settings

    def run(self) -> None:
        """Main REPL loop."""
        while True:
            try:
                prompt_text = Text()
                prompt_text.append("You", style=f"bold {BRAND['green']}")
                prompt_text.append(": ")

                user_input = self.console.input(prompt_text).strip()

                if not user_input:
                    continue

                self._dispatch(user_input)

            except (KeyboardInterrupt, EOFError):
                self.console.print(f"\n[{BRAND['dim']}]Goodbye.[/{BRAND['dim']}]")
                break

    def _dispatch(self, user_input: str) -> None:
        """Dispatch a user input line to the appropriate handler."""
        if not user_input.startswith("/"):
            self._chat(user_input)
            return

        parts = user_input.split()
        command = parts[0].lower()
        args = parts[1:]

        if command in _EXIT_COMMANDS:
            raise EOFError

        if command == "/help" and not args:
            render_help(self.console)
        elif command == "/temp" and len(args) == 1:
            self._set_temperature(args[0])
        elif command == "/mode" and len(args) == 1:
            self._set_mode(args[0])
        elif command == "/tokens" and len(args) == 1:
            self._set_max_tokens(args[0])
        else:
            self.console.print(
                f"  [{BRAND['dim']}]Unknown command. Type /help for available commands.[/{BRAND['dim']}]"
            )

    def _set_temperature(self, value: str) -> None:
        r = BRAND["red"]
        try:
            temperature = float(value)
        except ValueError:
            self.console.print(f"  [{r}]Invalid temperature value:[/{r}] '{escape(value)}'")
            return
        if not MIN_TEMPERATURE <= temperature <= MAX_TEMPERATURE:
            self.console.print(
                f"  [{r}]Temperature must be between {MIN_TEMPERATURE} and {MAX_TEMPERATURE}[/{r}]"
            )
            return
        self.settings.temperature = temperature
        self.console.print(f"  Temperature set to [{BRAND['cyan']}]{temperature}[/{BRAND['cyan']}]")

    def _set_mode(self, name: str) -> None:
        try:
            temperature = resolve_mode(name)
        except ValueError:
            d = BRAND["dim"]
            self.console.print(f"  [{d}]Unknown mode. Available modes: {format_modes()}[/{d}]")
            return
        self.settings.temperature = temperature
        self.console.print(
            f"  Mode switched, temperature set to [{BRAND['cyan']}]{temperature}[/{BRAND['cyan']}]"
        )

    def _set_max_tokens(self, value: str) -> None:
        r = BRAND["red"]
        try:
            max_tokens = int(value)
        except ValueError:
            self.console.print(f"  [{r}]Invalid tokens value:[/{r}] '{escape(value)}'")
            return
        if not MIN_MAX_TOKENS <= max_tokens <= MAX_MAX_TOKENS:
            self.console.print(
                f"  [{r}]Max tokens must be between {MIN_MAX_TOKENS} and {MAX_MAX_TOKENS}[/{r}]"
            )
            return
        self.settings.max_tokens = max_tokens
        self.console.print(
            f"  Max output length set to [{BRAND['cyan']}]{max_tokens}[/{BRAND['cyan']}] tokens"
        )

    def _chat(self, text: str) -> None:
        """Stream one reply; report failures and keep the loop alive."""
        try:
            asyncio.run(self.session.send(text))
        except Exception as e:
            logger.debug("Chat turn failed", exc_info=True)
            self.console.print(f"  [{BRAND['red']}]Error:[/{BRAND['red']}] {escape(str(e))}")
