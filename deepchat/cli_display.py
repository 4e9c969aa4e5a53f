"""Terminal display components for deepchat.

Welcome banner, command help and settings summaries. All rendering
uses Rich.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from deepchat import __version__
from deepchat.presets import format_modes, matching_modes
from deepchat.schemas.config import (
    MAX_MAX_TOKENS,
    MAX_TEMPERATURE,
    MIN_MAX_TOKENS,
    MIN_TEMPERATURE,
    ChatSettings,
)

# ── Brand Colors ──────────────────────────────────────────────────

BRAND = {
    "blue": "#4d6bfe",
    "cyan": "#00d7ff",
    "dim": "#6a7a8a",
    "amber": "#ffaa00",
    "red": "#ff4444",
    "green": "#00ff88",
}

# (command, description) rows for help output
COMMANDS: list[tuple[str, str]] = [
    ("/temp <value>", f"Set temperature ({MIN_TEMPERATURE}-{MAX_TEMPERATURE})"),
    ("/mode <mode>", "Preset temperature: " + format_modes()),
    ("/tokens <value>", f"Set max output length ({MIN_MAX_TOKENS}-{MAX_MAX_TOKENS})"),
    ("/help", "Show this help"),
    ("/exit", "Leave the chat (Ctrl+D also works)"),
]


def render_banner(console: Console, model: str, settings: ChatSettings) -> None:
    """Print the welcome panel with model and current settings."""
    body = Text()
    body.append("Welcome to DeepSeek AI chat!", style=f"bold {BRAND['blue']}")
    body.append(f"  v{__version__}\n", style=BRAND["dim"])
    body.append_text(settings_line(model, settings))

    console.print(Panel(body, border_style="dim", expand=True, padding=(0, 1)))
    render_help(console, title="Special commands:")


def render_help(console: Console, *, title: str = "Available commands:") -> None:
    """Print the slash-command table."""
    table = Table.grid(padding=(0, 4))
    table.add_column(style=BRAND["cyan"], width=18)
    table.add_column(style="dim")
    for command, description in COMMANDS:
        table.add_row(command, description)

    console.print(Text(f"  {title}", style="bold"))
    console.print(table)
    console.print(Text("─" * 40, style="dim"))


def settings_line(model: str, settings: ChatSettings) -> Text:
    """One-line summary of model, temperature and token limit."""
    text = Text()
    text.append("Model: ", style="bold")
    text.append(model, style=BRAND["cyan"])
    text.append(" │ ", style="dim")
    text.append("Temperature: ", style="bold")
    text.append(f"{settings.temperature}", style=BRAND["cyan"])
    modes = matching_modes(settings.temperature)
    if modes:
        text.append(f" ({'/'.join(modes)})", style="dim")
    text.append(" │ ", style="dim")
    text.append("Max tokens: ", style="bold")
    text.append(str(settings.max_tokens), style=BRAND["cyan"])
    return text
