"""Decoder operating modes and container state.

This module defines the finite state machine modes for the decoder and
the small records it keeps about open containers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class DecoderMode(Enum):
    """Decoder operating modes.

    - BLOCK: Between blocks, classifying each line
    - CODE_FENCE: Inside fenced code block, lines are literal

    """

    BLOCK = auto()
    CODE_FENCE = auto()


class ContainerKind(Enum):
    """Top-level container the decoder is inside.

    - QUOTE: `>` prefixed lines, closed by a line without `>`
    - INDENTED: details/admonition body, 4-space indented lines
    - FOOTNOTE: footnote definition body, indented or lazy lines

    """

    QUOTE = auto()
    INDENTED = auto()
    FOOTNOTE = auto()


class LineEnd(Enum):
    """How the previous content line ended, for continuation spacing."""

    TEXT = auto()  # last token was TEXT; encoders space-join
    BREAK = auto()  # hard break or empty content; no separator needed
    OTHER = auto()  # toggle, code span, link; separator goes into next TEXT


@dataclass(slots=True)
class ListLevel:
    """One open list in the nesting stack.

    Attributes:
        ordered: Ordered (`1.`) or unordered (`-`) list
        indent: Column of the list marker
        content_indent: Column where item content starts
    """

    ordered: bool
    indent: int
    content_indent: int


@dataclass(frozen=True, slots=True)
class ListMarker:
    """A classified list marker line."""

    ordered: bool
    indent: int
    content_indent: int
    rest: str
