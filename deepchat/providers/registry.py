"""TOML configuration loader.

Loads client defaults from defaults.toml. The shipped file lives in
deepchat/config/; a user file with the same ``[chat]`` table can be
passed instead.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

from pydantic import ValidationError

from deepchat.schemas.config import ChatConfig

# Default config directory relative to the deepchat package
_CONFIG_DIR = Path(__file__).parent.parent / "config"

DEFAULTS_FILE = _CONFIG_DIR / "defaults.toml"


def load_chat_config(config_path: Path | None = None) -> ChatConfig:
    """Load the chat client configuration from a TOML file.

    Args:
        config_path: Path to a TOML file with a ``[chat]`` table.
            Defaults to deepchat/config/defaults.toml.

    Returns:
        ChatConfig with values from the file; missing keys keep their
        model defaults.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ValueError: If the TOML is malformed or a value is out of range.
    """
    path = config_path or DEFAULTS_FILE
    if not path.exists():
        raise FileNotFoundError(f"Chat config not found: {path}")

    try:
        with open(path, "rb") as f:
            raw = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e

    chat_section = raw.get("chat", {})
    if not isinstance(chat_section, dict):
        raise ValueError(f"[chat] must be a table in {path}")

    # File keys are named after the request fields they seed
    values = dict(chat_section)
    if "temperature" in values:
        values["default_temperature"] = values.pop("temperature")
    if "max_tokens" in values:
        values["default_max_tokens"] = values.pop("max_tokens")

    try:
        return ChatConfig(**values)
    except ValidationError as e:
        raise ValueError(f"Invalid chat config in {path}: {e}") from e
