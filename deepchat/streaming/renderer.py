"""Incremental markdown renderer for streamed assistant replies.

Buffers fragments until a line or sentence boundary, then redraws the
buffered text through Rich's Markdown renderer. Tracks whether the
stream is inside a fenced code block so code is only flushed on whole
lines and is re-wrapped in fences before formatting.
"""

from __future__ import annotations

from dataclasses import dataclass

from pygments.token import Token
from rich.console import Console
from rich.control import Control
from rich.markdown import Markdown
from rich.segment import ControlType
from rich.style import Style
from rich.syntax import ANSISyntaxTheme
from rich.theme import Theme

FENCE = "```"
SENTENCE_ENDINGS = ("。", "!", "?")

# Header / bold / italic / code colours for streamed replies
SKIN = Theme({
    "markdown.h1": "bold cyan",
    "markdown.h2": "bold underline cyan",
    "markdown.h3": "bold cyan",
    "markdown.h4": "cyan",
    "markdown.h5": "underline cyan",
    "markdown.h6": "italic cyan",
    "markdown.strong": "bold yellow",
    "markdown.em": "italic magenta",
    "markdown.code": "bold green",
    "markdown.code_block": "green",
})

# Fenced blocks go through Syntax, which ignores the console theme.
# Lookups never reach the root Token, so every top-level type is listed.
CODE_THEME = ANSISyntaxTheme({
    token: Style(color="green")
    for token in (
        Token.Text, Token.Escape, Token.Error, Token.Other, Token.Keyword,
        Token.Name, Token.Literal, Token.Operator, Token.Punctuation,
        Token.Comment, Token.Generic,
    )
})

_CLEAR_LINE = Control(ControlType.CARRIAGE_RETURN, (ControlType.ERASE_IN_LINE, 0))


class MarkdownSink:
    """Terminal surface that redraws the current line with formatted text."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(theme=SKIN)

    def draw(self, text: str) -> None:
        self.console.control(_CLEAR_LINE)
        self.console.print(Markdown(text, code_theme=CODE_THEME))


@dataclass
class RenderState:
    """Buffers for one streamed response."""

    pending_segment: str = ""
    line_in_progress: str = ""
    in_code_block: bool = False
    transcript: str = ""


class IncrementalRenderer:
    """Decides fragment by fragment when to flush text to the sink.

    Every fragment is appended to ``state.transcript`` before any
    rendering decision, so the transcript is the exact concatenation
    of the stream regardless of what was drawn.

    A fragment containing a fence flushes everything buffered before
    it in the current mode, then toggles ``in_code_block``. Text before
    the fence in the same fragment is flushed with the preceding
    content. Text after an opening fence up to the first newline is
    its info string (``python`` etc.) and is not rendered; text after
    a closing fence is kept, minus one leading newline. Only one toggle
    happens per fragment, and kept text stops at any further fence.
    """

    def __init__(self, sink: MarkdownSink | None = None) -> None:
        self.sink = sink or MarkdownSink()
        self.state = RenderState()
        self.renders = 0

    @property
    def transcript(self) -> str:
        return self.state.transcript

    @property
    def in_code_block(self) -> bool:
        return self.state.in_code_block

    def feed(self, fragment: str) -> bool:
        """Consume one fragment. Returns True when it caused a render."""
        state = self.state
        state.transcript += fragment

        if FENCE in fragment:
            return self._toggle_fence(fragment)

        state.line_in_progress += fragment

        if "\n" in fragment:
            return self.flush()
        if not state.in_code_block and any(p in fragment for p in SENTENCE_ENDINGS):
            return self.flush()
        return False

    def flush(self) -> bool:
        """Render and clear buffered text. Returns False if nothing was buffered."""
        state = self.state
        state.pending_segment += state.line_in_progress
        state.line_in_progress = ""
        if not state.pending_segment:
            return False

        text = state.pending_segment
        if state.in_code_block:
            text = f"{FENCE}\n{text}\n{FENCE}"
        self.sink.draw(text)
        state.pending_segment = ""
        self.renders += 1
        return True

    def finish(self) -> bool:
        """Flush whatever remains at end of stream."""
        return self.flush()

    def _toggle_fence(self, fragment: str) -> bool:
        state = self.state
        before, _, after = fragment.partition(FENCE)

        state.line_in_progress += before
        rendered = self.flush()

        state.in_code_block = not state.in_code_block
        if state.in_code_block:
            _, newline, after = after.partition("\n")
            if not newline:
                after = ""
        else:
            after = after.removeprefix("\n")
        # One toggle per fragment: text from a second marker on is dropped
        after, _, _ = after.partition(FENCE)
        state.line_in_progress += after
        return rendered
