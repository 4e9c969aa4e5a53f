"""deepchat schema definitions.

Pydantic v2 models for messages, configuration and the streaming
envelope, plus the per-line stream event types.
"""

from deepchat.schemas.config import ChatConfig, ChatSettings
from deepchat.schemas.messages import ChatMessage, Role
from deepchat.schemas.streaming import (
    ChatCompletionChunk,
    DeltaContent,
    Fragment,
    Ignored,
    Sentinel,
    StreamChoice,
    StreamEvent,
)

__all__ = [
    "ChatCompletionChunk",
    "ChatConfig",
    "ChatMessage",
    "ChatSettings",
    "DeltaContent",
    "Fragment",
    "Ignored",
    "Role",
    "Sentinel",
    "StreamChoice",
    "StreamEvent",
]
