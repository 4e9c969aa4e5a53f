"""Streaming response consumer: SSE decoding and incremental rendering."""

from deepchat.streaming.decoder import (
    EventDecoder,
    aiter_fragments,
    decode_chunk,
    decode_line,
    iter_fragments,
)
from deepchat.streaming.renderer import (
    IncrementalRenderer,
    MarkdownSink,
    RenderState,
)

__all__ = [
    "EventDecoder",
    "IncrementalRenderer",
    "MarkdownSink",
    "RenderState",
    "aiter_fragments",
    "decode_chunk",
    "decode_line",
    "iter_fragments",
]
