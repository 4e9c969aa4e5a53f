"""API key lookup for deepchat.

Keys are read from the environment, which is seeded with this priority:
  1. Environment variables (highest — already set in shell)
  2. ~/.deepchat/keys.env
  3. .env in current directory (project-level)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

# Directory for user-level deepchat configuration
DEEPCHAT_HOME = Path.home() / ".deepchat"
KEYS_FILE = DEEPCHAT_HOME / "keys.env"


class MissingAPIKeyError(RuntimeError):
    """No API key was found for the configured environment variable."""

    def __init__(self, env_var: str) -> None:
        super().__init__(f"Please set the {env_var} environment variable")
        self.env_var = env_var


def load_keys_env(files: list[Path] | None = None) -> None:
    """Load KEY=VALUE files into os.environ without overwriting.

    Load order (later files don't overwrite earlier):
      1. Environment variables (already in os.environ)
      2. ~/.deepchat/keys.env
      3. .env in current working directory
    """
    if files is None:
        files = [KEYS_FILE, Path.cwd() / ".env"]
    for env_file in files:
        if env_file.is_file():
            _load_env_file(env_file)


def _load_env_file(path: Path) -> None:
    """Parse a simple KEY=VALUE .env file and set vars that aren't already set."""
    try:
        for line in path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("'\"")
            # Don't overwrite existing env vars
            if key and not os.environ.get(key):
                os.environ[key] = value
                logger.debug("Loaded %s from %s", key, path)
    except OSError:
        logger.debug("Could not read %s", path)


def get_api_key(env_var: str) -> str:
    """Return the API key stored in ``env_var``.

    Raises:
        MissingAPIKeyError: If the variable is unset or empty.
    """
    api_key = os.environ.get(env_var, "").strip()
    if not api_key:
        raise MissingAPIKeyError(env_var)
    return api_key
