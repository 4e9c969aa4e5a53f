"""deepchat provider layer.

The HTTP client that talks to the chat-completion API, and the TOML
loader for its configuration.
"""

from deepchat.providers.client import ChatAPIError, DeepSeekClient
from deepchat.providers.registry import load_chat_config

__all__ = [
    "ChatAPIError",
    "DeepSeekClient",
    "load_chat_config",
]
