"""Streaming schemas for server-sent chat-completion events.

Defines the JSON envelope carried by each ``data:`` line and the
per-line decode result consumed by the renderer pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, Field


class DeltaContent(BaseModel):
    """Incremental message content carried by one streamed choice."""

    role: str | None = Field(default=None, description="Role, sent on the first delta only")
    content: str | None = Field(default=None, description="New assistant text")


class StreamChoice(BaseModel):
    """One choice inside a streamed completion chunk."""

    delta: DeltaContent | None = Field(default=None, description="Incremental content")


class ChatCompletionChunk(BaseModel):
    """The JSON payload of a single ``data:`` event line."""

    choices: list[StreamChoice] = Field(description="Streamed choices; only the first is used")

    def first_content(self) -> str | None:
        """Return ``choices[0].delta.content`` or None when any link is absent."""
        if not self.choices:
            return None
        delta = self.choices[0].delta
        if delta is None:
            return None
        return delta.content


# ── Per-line decode result ────────────────────────────────────────


@dataclass(frozen=True)
class Fragment:
    """A line that delivered assistant text (possibly empty)."""

    text: str


@dataclass(frozen=True)
class Sentinel:
    """The ``[DONE]`` end-of-stream marker."""


@dataclass(frozen=True)
class Ignored:
    """A framing line, keep-alive, or payload that failed to parse."""

    reason: str


StreamEvent = Fragment | Sentinel | Ignored
