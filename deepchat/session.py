"""Chat session — conversation history and the per-turn streaming loop.

One ChatSession lives for the whole process. Each call to ``send()``
streams a single reply: raw chunks from the client are decoded by
``aiter_fragments`` into a fresh IncrementalRenderer, and the transcript is
stored as the assistant message.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.text import Text

from deepchat.providers.client import DeepSeekClient
from deepchat.schemas.config import ChatSettings
from deepchat.schemas.messages import ChatMessage, Role
from deepchat.streaming.decoder import aiter_fragments
from deepchat.streaming.renderer import SKIN, IncrementalRenderer, MarkdownSink

logger = logging.getLogger(__name__)

ASSISTANT_LABEL = "DeepSeek: "


class ChatSession:
    """Conversation state plus the streaming turn driver."""

    def __init__(
        self,
        client: DeepSeekClient,
        settings: ChatSettings,
        *,
        console: Console | None = None,
    ) -> None:
        self.client = client
        self.settings = settings
        self.console = console or Console(theme=SKIN)
        self.system_prompt = client.config.system_prompt
        self.messages: list[ChatMessage] = []
        self.reset()

    def reset(self) -> None:
        """Drop the conversation back to the system prompt."""
        self.messages = [ChatMessage(role=Role.SYSTEM, content=self.system_prompt)]

    async def send(self, user_input: str) -> str:
        """Send one user message and stream the reply to the console.

        Returns:
            The full reply text, which is also appended to the history.

        Raises:
            ChatAPIError: If the request fails. Output already drawn stays
                on screen and a non-empty partial reply is still stored.
        """
        self.messages.append(ChatMessage(role=Role.USER, content=user_input))

        self.console.print(Text(ASSISTANT_LABEL, style="bold cyan"), end="")
        renderer = IncrementalRenderer(MarkdownSink(self.console))
        chunks = self.client.stream_chunks(self.messages, self.settings)
        completed = False

        try:
            async for fragment in aiter_fragments(chunks):
                renderer.feed(fragment)
            completed = True
        finally:
            renderer.finish()
            self.console.print()
            if completed or renderer.transcript:
                self.messages.append(
                    ChatMessage(role=Role.ASSISTANT, content=renderer.transcript)
                )
            if not completed:
                logger.debug(
                    "Turn aborted after %d characters", len(renderer.transcript),
                )

        logger.debug("Turn complete: %d renders", renderer.renders)
        return renderer.transcript
