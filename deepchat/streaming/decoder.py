"""Server-sent event decoder for streamed chat completions.

Turns raw byte chunks from the response body into content fragments.
Decoding is total: invalid UTF-8 becomes U+FFFD and unparseable lines
are skipped, so a bad line never aborts the stream.

Chunks are decoded independently. A multi-byte character or a ``data:``
line split across two chunks is not reassembled; the character may
surface as replacement characters and the split line is dropped.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterable, AsyncIterator, Iterable, Iterator

from pydantic import ValidationError

from deepchat.schemas.streaming import (
    ChatCompletionChunk,
    Fragment,
    Ignored,
    Sentinel,
    StreamEvent,
)

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


def decode_line(line: str) -> StreamEvent:
    """Classify a single event line."""
    if not line.startswith(DATA_PREFIX):
        return Ignored("not a data line")

    payload = line[len(DATA_PREFIX):]
    if payload == DONE_SENTINEL:
        return Sentinel()

    try:
        envelope = ChatCompletionChunk.model_validate_json(payload)
    except ValidationError:
        return Ignored("malformed envelope")

    content = envelope.first_content()
    if content is None:
        return Ignored("no content")
    return Fragment(content)


def decode_chunk(chunk: bytes) -> Iterator[StreamEvent]:
    """Decode one raw chunk into a stream event per line."""
    text = chunk.decode("utf-8", errors="replace")
    for line in text.split("\n"):
        yield decode_line(line.rstrip("\r"))


class EventDecoder:
    """Fragment source for a single streamed response.

    Wraps :func:`decode_chunk` and keeps counters for debug logging.
    """

    def __init__(self) -> None:
        self.fragments = 0
        self.sentinels = 0
        self.ignored = 0

    def feed(self, chunk: bytes) -> Iterator[str]:
        """Yield the content fragments carried by ``chunk``."""
        for event in decode_chunk(chunk):
            if isinstance(event, Fragment):
                self.fragments += 1
                yield event.text
            elif isinstance(event, Sentinel):
                self.sentinels += 1
            else:
                self.ignored += 1
                if event.reason == "malformed envelope":
                    logger.debug("Skipping malformed event line")

    def log_summary(self) -> None:
        logger.debug(
            "Stream decoded: %d fragments, %d sentinels, %d ignored lines",
            self.fragments, self.sentinels, self.ignored,
        )


def iter_fragments(chunks: Iterable[bytes]) -> Iterator[str]:
    """Lazily yield fragments from a synchronous chunk source."""
    decoder = EventDecoder()
    try:
        for chunk in chunks:
            yield from decoder.feed(chunk)
    finally:
        decoder.log_summary()


async def aiter_fragments(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """Lazily yield fragments from an asynchronous chunk source.

    Read failures from ``chunks`` propagate unchanged; the decoder
    summary is logged either way.
    """
    decoder = EventDecoder()
    try:
        async for chunk in chunks:
            for fragment in decoder.feed(chunk):
                yield fragment
    finally:
        decoder.log_summary()
