"""Streaming chat-completion client.

Sends the conversation to an OpenAI-compatible ``/chat/completions``
endpoint with ``stream: true`` and yields the raw response body chunk by
chunk. Decoding the event stream is left to ``deepchat.streaming``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any

import httpx

from deepchat.schemas.config import ChatConfig, ChatSettings
from deepchat.schemas.messages import ChatMessage

logger = logging.getLogger(__name__)


class ChatAPIError(RuntimeError):
    """The request could not be sent or the server rejected it."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        text = self.args[0]
        if self.status_code is not None:
            text += f" (status {self.status_code})"
        if self.body:
            text += f": {self.body[:200]}"
        return text


class DeepSeekClient:
    """Thin async HTTP client for streamed chat completions.

    No retries and, unless ``config.timeout`` is set, no network
    timeout: a request runs until the server closes the stream or the
    transport fails.
    """

    def __init__(
        self,
        config: ChatConfig,
        api_key: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._api_key = api_key
        self._transport = transport

    @property
    def config(self) -> ChatConfig:
        return self._config

    def build_payload(
        self, messages: Sequence[ChatMessage], settings: ChatSettings
    ) -> dict[str, Any]:
        """Build the JSON request body."""
        return {
            "model": self._config.model,
            "messages": [m.to_wire() for m in messages],
            "temperature": settings.temperature,
            "max_tokens": settings.max_tokens,
            "stream": True,
        }

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "text/event-stream",
        }

    async def stream_chunks(
        self, messages: Sequence[ChatMessage], settings: ChatSettings
    ) -> AsyncIterator[bytes]:
        """Yield raw body chunks of one streamed completion.

        Raises:
            ChatAPIError: On an HTTP error status or a transport failure,
                including failures mid-stream.
        """
        url = self._config.completions_url
        payload = self.build_payload(messages, settings)
        logger.debug(
            "POST %s model=%s messages=%d temperature=%.2f max_tokens=%d",
            url, self._config.model, len(messages),
            settings.temperature, settings.max_tokens,
        )

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout),
                transport=self._transport,
            ) as client:
                async with client.stream(
                    "POST", url, headers=self._headers(), json=payload,
                ) as response:
                    if response.status_code >= 400:
                        body = (await response.aread()).decode("utf-8", errors="replace")
                        logger.warning(
                            "Chat request failed with status %d", response.status_code,
                        )
                        raise ChatAPIError(
                            "HTTP error", status_code=response.status_code, body=body,
                        )
                    logger.debug("Streaming response (status %d)", response.status_code)
                    async for chunk in response.aiter_bytes():
                        yield chunk
        except httpx.TimeoutException as e:
            logger.warning("Chat request timed out: %s", e)
            raise ChatAPIError("Request timed out") from e
        except httpx.HTTPError as e:
            logger.warning("Chat request failed: %s", e)
            raise ChatAPIError(f"Failed to reach server: {type(e).__name__}") from e
