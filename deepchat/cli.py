"""deepchat CLI — Typer + Rich terminal interface.

Commands: (default) interactive chat, ask, config show.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

# Ensure stdout/stderr use UTF-8 on Windows to avoid UnicodeEncodeError
# when Rich renders CJK punctuation and box-drawing characters.
if sys.platform == "win32":
    for _stream_name in ("stdout", "stderr"):
        _stream = getattr(sys, _stream_name, None)
        if _stream and hasattr(_stream, "reconfigure"):
            try:
                _stream.reconfigure(encoding="utf-8")
            except Exception:
                pass

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from deepchat import __version__
from deepchat.keys import MissingAPIKeyError, get_api_key, load_keys_env
from deepchat.providers.client import ChatAPIError, DeepSeekClient
from deepchat.providers.registry import load_chat_config
from deepchat.schemas.config import ChatConfig, ChatSettings
from deepchat.streaming.renderer import SKIN

console = Console(theme=SKIN)

# ── App and sub-apps ─────────────────────────────────────────────

app = typer.Typer(
    name="deepchat",
    help="Streaming terminal chat for DeepSeek and other OpenAI-compatible APIs.",
    no_args_is_help=False,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    name="config",
    help="Show client configuration.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")


# ── Shared options ───────────────────────────────────────────────

_TEMPERATURE = typer.Option(
    None, "--temperature", "-t", help="Sampling temperature (0.0-1.5)",
)
_MAX_TOKENS = typer.Option(
    None, "--max-tokens", "-m", help="Maximum output length (1-8192)",
)
_MODEL = typer.Option(None, "--model", help="Model identifier override")
_CONFIG = typer.Option(
    None, "--config", "-c", help="Path to a TOML config file",
)
_VERBOSE = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


# ── Version callback ───────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"deepchat {__version__}")
        raise typer.Exit()


# ── Helpers ──────────────────────────────────────────────────────


def _configure_logging(verbose: bool) -> None:
    """Route log records through Rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def _load_config(config_path: Path | None, model: str | None = None) -> ChatConfig:
    """Load chat config, exit on error."""
    try:
        config = load_chat_config(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error loading config:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None
    if model:
        config = config.model_copy(update={"model": model})
    return config


def _build_settings(
    config: ChatConfig, temperature: float | None, max_tokens: int | None,
) -> ChatSettings:
    """Apply CLI overrides on top of config defaults, exit on bad ranges."""
    settings = ChatSettings.from_config(config)
    try:
        if temperature is not None:
            settings.temperature = temperature
        if max_tokens is not None:
            settings.max_tokens = max_tokens
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(loc) for loc in error["loc"])
        console.print(f"[red]Invalid {field}:[/red] {escape(error['msg'])}")
        raise typer.Exit(1) from None
    return settings


def _build_client(config: ChatConfig) -> DeepSeekClient:
    """Resolve the API key and build the client, exit if it is missing."""
    load_keys_env()
    try:
        api_key = get_api_key(config.api_key_env)
    except MissingAPIKeyError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None
    return DeepSeekClient(config, api_key)


# ── App Callback ────────────────────────────────────────────────


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    temperature: float = _TEMPERATURE,
    max_tokens: int = _MAX_TOKENS,
    model: str = _MODEL,
    config_path: Path = _CONFIG,
    verbose: bool = _VERBOSE,
) -> None:
    """deepchat — stream chat replies as formatted markdown."""
    _configure_logging(verbose)
    if ctx.invoked_subcommand is not None:
        return

    from deepchat.cli_display import render_banner
    from deepchat.repl import ChatREPL
    from deepchat.session import ChatSession

    config = _load_config(config_path, model)
    settings = _build_settings(config, temperature, max_tokens)
    client = _build_client(config)

    render_banner(console, config.model, settings)
    ChatREPL(ChatSession(client, settings, console=console)).run()


# ── deepchat ask ─────────────────────────────────────────────────


@app.command()
def ask(
    prompt: str = typer.Argument(help="Message to send"),
    temperature: float = _TEMPERATURE,
    max_tokens: int = _MAX_TOKENS,
    model: str = _MODEL,
    config_path: Path = _CONFIG,
) -> None:
    """Send a single message and stream the reply."""
    from deepchat.session import ChatSession

    config = _load_config(config_path, model)
    settings = _build_settings(config, temperature, max_tokens)
    client = _build_client(config)

    session = ChatSession(client, settings, console=console)
    try:
        asyncio.run(session.send(prompt))
    except ChatAPIError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None


# ── deepchat config ──────────────────────────────────────────────


@config_app.command("show")
def config_show(config_path: Path = _CONFIG) -> None:
    """Show the resolved client configuration."""
    config = _load_config(config_path)

    table = Table(title="Chat Configuration", show_header=False, show_lines=True)
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    table.add_row("API Base", config.api_base)
    table.add_row("Model", config.model)
    table.add_row("API Key Env", config.api_key_env)
    table.add_row("System Prompt", config.system_prompt)
    table.add_row("Timeout", f"{config.timeout}s" if config.timeout else "none")
    table.add_row("Temperature", str(config.default_temperature))
    table.add_row("Max Tokens", str(config.default_max_tokens))

    console.print(table)


@config_app.command("path")
def config_path_cmd() -> None:
    """Show configuration file locations."""
    from deepchat.keys import KEYS_FILE
    from deepchat.providers.registry import DEFAULTS_FILE

    files = [
        ("Defaults", DEFAULTS_FILE),
        ("Keys", KEYS_FILE),
        ("Project .env", Path.cwd() / ".env"),
    ]

    table = Table(title="Configuration Paths", show_header=False)
    table.add_column("Config", style="bold")
    table.add_column("Path")
    table.add_column("Status")

    for name, path in files:
        exists = path.exists()
        status = "[green]found[/green]" if exists else "[red]missing[/red]"
        table.add_row(name, str(path), status)

    console.print(table)
