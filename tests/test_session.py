"""Tests for the chat session turn loop."""

from __future__ import annotations

import io
import json
from unittest.mock import patch

import httpx
import pytest
from rich.console import Console

from deepchat.providers.client import ChatAPIError, DeepSeekClient
from deepchat.schemas.config import ChatConfig, ChatSettings
from deepchat.schemas.messages import Role
from deepchat.session import ChatSession
from deepchat.streaming.decoder import aiter_fragments


def _sse(*contents: str, done: bool = True) -> list[bytes]:
    lines = [
        "data: " + json.dumps({"choices": [{"delta": {"role": "assistant"}}]}) + "\n\n"
    ]
    for content in contents:
        lines.append(
            "data: " + json.dumps({"choices": [{"delta": {"content": content}}]}) + "\n\n"
        )
    if done:
        lines.append("data: [DONE]\n\n")
    return [line.encode() for line in lines]


class _ChunkStream(httpx.AsyncByteStream):
    def __init__(self, chunks: list[bytes], fail_after: bool = False) -> None:
        self._chunks = chunks
        self._fail_after = fail_after

    async def __aiter__(self):
        for chunk in self._chunks:
            yield chunk
        if self._fail_after:
            raise httpx.RemoteProtocolError("peer closed connection")


def _session(handler) -> tuple[ChatSession, io.StringIO]:
    buf = io.StringIO()
    console = Console(file=buf, width=80, color_system=None)
    client = DeepSeekClient(
        ChatConfig(system_prompt="Be brief"), "sk-test",
        transport=httpx.MockTransport(handler),
    )
    return ChatSession(client, ChatSettings(), console=console), buf


class TestChatSession:
    def test_starts_with_system_prompt(self):
        session, _ = _session(lambda request: httpx.Response(200))
        assert len(session.messages) == 1
        assert session.messages[0].role == Role.SYSTEM
        assert session.messages[0].content == "Be brief"

    @pytest.mark.asyncio
    async def test_turn_stores_transcript(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=_ChunkStream(_sse("Hello, ", "world", "!")))

        session, buf = _session(handler)
        reply = await session.send("Hi")

        assert reply == "Hello, world!"
        assert [m.role for m in session.messages] == [Role.SYSTEM, Role.USER, Role.ASSISTANT]
        assert session.messages[1].content == "Hi"
        assert session.messages[2].content == "Hello, world!"
        output = buf.getvalue()
        assert "DeepSeek:" in output
        assert "Hello, world!" in output

    @pytest.mark.asyncio
    async def test_history_sent_on_next_turn(self):
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, stream=_ChunkStream(_sse("ok\n")))

        session, _ = _session(handler)
        await session.send("first")
        await session.send("second")

        roles = [m["role"] for m in bodies[1]["messages"]]
        assert roles == ["system", "user", "assistant", "user"]
        assert bodies[1]["messages"][2]["content"] == "ok\n"

    @pytest.mark.asyncio
    async def test_code_block_reply(self):
        def handler(request: httpx.Request) -> httpx.Response:
            chunks = _sse("Code:\n", "```", "python\n", "x = 1\n", "```", "\n")
            return httpx.Response(200, stream=_ChunkStream(chunks))

        session, buf = _session(handler)
        reply = await session.send("show code")

        assert reply == "Code:\n```python\nx = 1\n```\n"
        assert "x = 1" in buf.getvalue()

    @pytest.mark.asyncio
    async def test_trailing_text_flushed(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=_ChunkStream(_sse("no", " terminator")))

        session, buf = _session(handler)
        await session.send("x")
        assert "no terminator" in buf.getvalue()

    @pytest.mark.asyncio
    async def test_http_error_keeps_user_message(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="boom")

        session, _ = _session(handler)
        with pytest.raises(ChatAPIError) as exc_info:
            await session.send("Hi")

        assert exc_info.value.status_code == 500
        assert [m.role for m in session.messages] == [Role.SYSTEM, Role.USER]

    @pytest.mark.asyncio
    async def test_mid_stream_failure_keeps_partial_reply(self):
        def handler(request: httpx.Request) -> httpx.Response:
            chunks = _sse("Partial ", "answer", done=False)
            return httpx.Response(200, stream=_ChunkStream(chunks, fail_after=True))

        session, buf = _session(handler)
        with pytest.raises(ChatAPIError):
            await session.send("Hi")

        assert session.messages[-1].role == Role.ASSISTANT
        assert session.messages[-1].content == "Partial answer"
        assert "Partial answer" in buf.getvalue()

    @pytest.mark.asyncio
    async def test_chunks_decoded_through_aiter_fragments(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=_ChunkStream(_sse("a", "b\n")))

        session, _ = _session(handler)
        with patch("deepchat.session.aiter_fragments", wraps=aiter_fragments) as spy:
            reply = await session.send("Hi")

        spy.assert_called_once()
        assert reply == "ab\n"

    @pytest.mark.asyncio
    async def test_reset(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, stream=_ChunkStream(_sse("hi")))

        session, _ = _session(handler)
        await session.send("Hi")
        session.reset()
        assert len(session.messages) == 1
        assert session.messages[0].role == Role.SYSTEM
