"""Conversation message schemas.

Defines the role-tagged message sent to and received from the
chat-completion API.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class Role(StrEnum):
    """Author of a conversation message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """A single message in the conversation history."""

    role: Role = Field(description="Who authored the message")
    content: str = Field(description="Message text")

    def to_wire(self) -> dict[str, str]:
        """Return the OpenAI-format dict used in request payloads."""
        return {"role": self.role.value, "content": self.content}
